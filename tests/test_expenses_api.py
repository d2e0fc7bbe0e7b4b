from io import BytesIO

from PIL import Image

from fakes import AUTH_HEADERS, USER, seed_expense

API = "/api/v1"


def png_bytes(size=(2000, 1000), color=(200, 30, 30)) -> bytes:
    buf = BytesIO()
    Image.new("RGB", size, color).save(buf, format="PNG")
    return buf.getvalue()


class TestExpenseRoutes:
    def test_requires_token(self, client):
        response = client.get(f"{API}/expenses")
        assert response.status_code == 401
        assert response.json()["success"] is False

    def test_create_and_list(self, client):
        response = client.post(f"{API}/expenses", json={
            "merchant": "Bar Roma",
            "expense_date": "2024-03-01",
            "total": 12.5,
            "currency": "eur",
            "category": "Vitto Comune",
            "items": [{"name": "Caffè", "quantity": 2, "price": 1.2}],
        }, headers=AUTH_HEADERS)
        assert response.status_code == 201
        created = response.json()
        assert created["user_id"] == USER["id"]
        assert created["currency"] == "EUR"

        page = client.get(f"{API}/expenses", headers=AUTH_HEADERS).json()
        assert [e["id"] for e in page["items"]] == [created["id"]]
        assert page["has_more"] is False
        assert page["next_offset"] == 1

    def test_paging_and_search(self, client, fake_supabase):
        for day in range(1, 29):
            seed_expense(fake_supabase, merchant=f"Esercente {day}", expense_date=f"2024-02-{day:02d}")
        for day in range(1, 6):
            seed_expense(fake_supabase, merchant="Taxi 3570", category="Taxi", expense_date=f"2024-03-{day:02d}")

        first = client.get(f"{API}/expenses", headers=AUTH_HEADERS).json()
        assert len(first["items"]) == 30
        assert first["has_more"] is True

        second = client.get(f"{API}/expenses", params={"offset": first["next_offset"]}, headers=AUTH_HEADERS).json()
        assert len(second["items"]) == 3
        assert second["has_more"] is False

        found = client.get(f"{API}/expenses", params={"q": "taxi"}, headers=AUTH_HEADERS).json()
        assert len(found["items"]) == 5
        assert found["has_more"] is False

    def test_get_update_and_missing(self, client, fake_supabase):
        row = seed_expense(fake_supabase)
        assert client.get(f"{API}/expenses/{row['id']}", headers=AUTH_HEADERS).json()["merchant"] == "Bar Roma"

        updated = client.put(f"{API}/expenses/{row['id']}", json={"total": 14}, headers=AUTH_HEADERS).json()
        assert updated["total"] == 14
        assert updated["merchant"] == "Bar Roma"

        assert client.get(f"{API}/expenses/missing", headers=AUTH_HEADERS).status_code == 404

    def test_update_currency_normalized(self, client, fake_supabase):
        row = seed_expense(fake_supabase)

        lower = client.put(f"{API}/expenses/{row['id']}", json={"currency": "usd"}, headers=AUTH_HEADERS)
        assert lower.json()["currency"] == "USD"

        null = client.put(f"{API}/expenses/{row['id']}", json={"currency": None}, headers=AUTH_HEADERS)
        assert null.status_code == 200
        assert null.json()["currency"] == "EUR"

        listing = client.get(f"{API}/expenses", headers=AUTH_HEADERS)
        assert listing.status_code == 200
        assert listing.json()["items"][0]["currency"] == "EUR"

    def test_bad_paging_params_are_422(self, client):
        assert client.get(f"{API}/expenses", params={"offset": -1}, headers=AUTH_HEADERS).status_code == 422
        assert client.get(f"{API}/expenses", params={"limit": -1}, headers=AUTH_HEADERS).status_code == 422
        assert client.get(f"{API}/expenses", params={"limit": 0}, headers=AUTH_HEADERS).status_code == 422

    def test_trash_lifecycle(self, client, fake_supabase):
        row = seed_expense(fake_supabase)

        deleted = client.delete(f"{API}/expenses/{row['id']}", headers=AUTH_HEADERS)
        assert deleted.status_code == 200
        assert deleted.json()["deleted_at"] is not None
        assert client.get(f"{API}/expenses", headers=AUTH_HEADERS).json()["items"] == []

        trash = client.get(f"{API}/expenses/trash", headers=AUTH_HEADERS).json()
        assert [e["id"] for e in trash] == [row["id"]]

        restored = client.post(f"{API}/expenses/{row['id']}/restore", headers=AUTH_HEADERS)
        assert restored.json()["deleted_at"] is None

        client.delete(f"{API}/expenses/{row['id']}", headers=AUTH_HEADERS)
        gone = client.delete(f"{API}/expenses/{row['id']}/permanent", headers=AUTH_HEADERS)
        assert gone.status_code == 204
        assert fake_supabase.rows("expenses") == []
        assert client.delete(f"{API}/expenses/{row['id']}/permanent", headers=AUTH_HEADERS).status_code == 404

    def test_mark_sent(self, client, fake_supabase):
        row = seed_expense(fake_supabase)
        response = client.post(
            f"{API}/expenses/{row['id']}/sent",
            json={"recipients": ["anna@example.com"]},
            headers=AUTH_HEADERS,
        )
        assert response.json()["sent_to_email"] == "anna@example.com"


class TestReceiptImageUpload:
    def test_upload_is_downscaled_jpeg(self, client, fake_supabase):
        response = client.post(
            f"{API}/expenses/receipt-image",
            files={"file": ("scontrino.png", png_bytes(), "image/png")},
            headers=AUTH_HEADERS,
        )
        assert response.status_code == 201
        body = response.json()
        assert body["path"].startswith("user-1/")
        assert body["path"].endswith(".jpg")
        assert body["image_url"].endswith(f"/object/public/receipts/{body['path']}")

        stored = fake_supabase.storage.objects[("receipts", body["path"])]
        assert len(stored) == body["size_bytes"]
        with Image.open(BytesIO(stored)) as img:
            assert img.format == "JPEG"
            assert img.size == (1024, 512)

    def test_non_image_rejected(self, client):
        response = client.post(
            f"{API}/expenses/receipt-image",
            files={"file": ("note.txt", b"hello", "text/plain")},
            headers=AUTH_HEADERS,
        )
        assert response.status_code == 400

    def test_corrupt_image_rejected(self, client, fake_supabase):
        response = client.post(
            f"{API}/expenses/receipt-image",
            files={"file": ("scontrino.jpg", b"not really a jpeg", "image/jpeg")},
            headers=AUTH_HEADERS,
        )
        assert response.status_code == 400
        assert fake_supabase.storage.objects == {}


class TestProfileRoutes:
    def test_profile_created_on_first_access(self, client, fake_supabase):
        response = client.get(f"{API}/profiles/me", headers=AUTH_HEADERS)
        assert response.status_code == 200
        profile = response.json()
        assert profile["id"] == USER["id"]
        assert profile["display_name"] == "Mario Rossi"
        assert profile["default_emails"] == [USER["email"]]

        client.get(f"{API}/profiles/me", headers=AUTH_HEADERS)
        assert len(fake_supabase.rows("profiles")) == 1

    def test_update_default_emails(self, client):
        response = client.put(
            f"{API}/profiles/me",
            json={"default_emails": ["amministrazione@example.com"], "is_default_email": True},
            headers=AUTH_HEADERS,
        )
        assert response.status_code == 200
        assert response.json()["default_emails"] == ["amministrazione@example.com"]
        assert response.json()["is_default_email"] is True

    def test_invalid_default_email_is_422(self, client):
        response = client.put(f"{API}/profiles/me", json={"default_emails": ["nope"]}, headers=AUTH_HEADERS)
        assert response.status_code == 422


class TestReportRoutes:
    def test_export_csv_download(self, client, fake_supabase):
        seed_expense(fake_supabase)
        response = client.get(f"{API}/reports/export.csv", headers=AUTH_HEADERS)
        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/csv")
        assert 'filename="nota-spese-export.csv"' in response.headers["content-disposition"]
        assert response.text.split("\n")[1] == '"2024-03-01","Bar Roma","12.5","EUR","Vitto Comune"'

    def test_monthly_report(self, client, fake_supabase):
        seed_expense(fake_supabase, expense_date="2024-03-05", total=20, category="Taxi")
        report = client.get(f"{API}/reports/monthly", params={"year": 2024, "month": 3}, headers=AUTH_HEADERS).json()
        assert report["label"] == "marzo 2024"
        assert report["total"] == 20
        assert report["top_category"]["name"] == "Taxi"

    def test_monthly_csv_filename(self, client):
        response = client.get(
            f"{API}/reports/monthly/export.csv", params={"year": 2024, "month": 3}, headers=AUTH_HEADERS
        )
        assert 'filename="report_2024_03.csv"' in response.headers["content-disposition"]
        assert response.text == "Data,Esercente,Categoria,Importo"

    def test_month_out_of_range(self, client):
        response = client.get(f"{API}/reports/monthly", params={"year": 2024, "month": 13}, headers=AUTH_HEADERS)
        assert response.status_code == 422


class TestAuthRoutes:
    def test_me(self, client):
        response = client.get(f"{API}/auth/me", headers=AUTH_HEADERS)
        assert response.json()["email"] == USER["email"]

    def test_logout(self, client, auth_service):
        response = client.post(f"{API}/auth/logout", headers=AUTH_HEADERS)
        assert response.status_code == 200
        assert auth_service.logged_out == ["valid-token"]


class TestHealth:
    def test_health(self, client):
        response = client.get("/health")
        assert response.json() == {"status": "healthy"}
        assert response.headers["x-content-type-options"] == "nosniff"
