import pytest

from app.core.errors import ConfigurationError, RequestValidationFailed, UpstreamServiceError
from app.modules.notifications.schemas import ExpenseEmailData, SendEmailRequest
from app.modules.notifications.service import EmailDispatcher
from app.modules.notifications.templates import build_subject, render_expense_email
from fakes import FakeResponse, FakeSession


def make_dispatcher(*responses, api_key="re_test"):
    return EmailDispatcher(api_key=api_key, session=FakeSession(*responses), sender="Nota Spese <test@example.com>")


class TestExpenseEmailData:
    def test_expense_date_alias_and_coercion(self):
        expense = ExpenseEmailData.model_validate({
            "merchant": "Bar Roma",
            "expense_date": "2024-03-01",
            "total": "12,50",
            "currency": "eur",
            "items": None,
        })
        assert expense.date == "2024-03-01"
        assert expense.total == 12.5
        assert expense.currency == "EUR"
        assert expense.items == []

    def test_recipients_accept_string_or_list(self):
        assert SendEmailRequest(to=" anna@example.com ").recipients() == ["anna@example.com"]
        assert SendEmailRequest(to=["a@example.com", "", "b@example.com"]).recipients() == [
            "a@example.com", "b@example.com"
        ]
        assert SendEmailRequest.model_validate({"imageBase64": "QUJD"}).image_base64 == "QUJD"


class TestTemplates:
    def test_subject(self):
        assert build_subject(ExpenseEmailData(merchant="Taxi 3570", total=18)) == "Nota Spese: Taxi 3570 - EUR 18.00"
        assert build_subject(ExpenseEmailData()) == "Nota Spese: Nuova spesa - EUR 0.00"

    def test_missing_date_and_fields(self):
        html = render_expense_email(ExpenseEmailData())
        assert "Data non disponibile" in html
        assert "Non specificato" in html
        assert "Non categorizzato" in html

    def test_items_rendered(self):
        html = render_expense_email(ExpenseEmailData(
            merchant="Bar Roma", date="2024-03-01", total=3.4,
            items=[{"name": "Caffè & cornetto", "quantity": 1, "price": 3.4}],
        ))
        assert "1 marzo 2024" in html
        assert "Caffè &amp; cornetto (x1)" in html
        assert "EUR 3.40" in html


class TestEmailDispatcher:
    def test_returns_message_id(self):
        dispatcher = make_dispatcher(FakeResponse(200, {"id": "msg-9"}))
        assert dispatcher.send(["anna@example.com"], ExpenseEmailData(merchant="Bar Roma")) == "msg-9"
        call = dispatcher.s.calls[0]
        assert call["url"] == "https://api.resend.com/emails"
        assert call["json"]["from"] == "Nota Spese <test@example.com>"

    def test_missing_key(self):
        with pytest.raises(ConfigurationError):
            make_dispatcher(api_key=None).send(["anna@example.com"], ExpenseEmailData())

    def test_missing_expense(self):
        with pytest.raises(RequestValidationFailed):
            make_dispatcher().send(["anna@example.com"], None)

    def test_invalid_address(self):
        with pytest.raises(RequestValidationFailed) as exc:
            make_dispatcher().validate_recipients(["anna@example.com", "luca@"])
        assert "luca@" in exc.value.message

    def test_provider_error(self):
        dispatcher = make_dispatcher(FakeResponse(500, text="boom"))
        with pytest.raises(UpstreamServiceError) as exc:
            dispatcher.send(["anna@example.com"], ExpenseEmailData())
        assert exc.value.upstream_status == 500
        assert exc.value.message == "Email send failed: 500"

    def test_bare_base64_attachment(self):
        payload = make_dispatcher().build_payload(["anna@example.com"], ExpenseEmailData(), "QUJD")
        assert payload["attachments"] == [{"filename": "scontrino.jpg", "content": "QUJD"}]
