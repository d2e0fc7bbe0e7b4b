from html import escape

from app.core.locale import format_long_date
from app.modules.notifications.schemas import ExpenseEmailData

_STYLE = """
    body { font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, sans-serif; line-height: 1.6; color: #333; }
    .container { max-width: 600px; margin: 0 auto; padding: 20px; }
    .header { background: linear-gradient(135deg, #020617 0%, #0f172a 100%); color: white; padding: 24px; border-radius: 12px 12px 0 0; }
    .content { background: #f8fafc; padding: 24px; border-radius: 0 0 12px 12px; }
    .field { margin-bottom: 16px; }
    .label { font-size: 12px; color: #64748b; text-transform: uppercase; letter-spacing: 0.5px; }
    .value { font-size: 16px; font-weight: 500; color: #0f172a; }
    .total { font-size: 24px; font-weight: 700; color: #0891b2; }
    .items { background: white; padding: 16px; border-radius: 8px; margin-top: 16px; }
    .footer { text-align: center; padding: 16px; color: #94a3b8; font-size: 12px; }
"""


def _field(label: str, value: str, css_class: str = "value") -> str:
    return (
        '      <div class="field">\n'
        f'        <div class="label">{label}</div>\n'
        f'        <div class="{css_class}">{value}</div>\n'
        '      </div>\n'
    )


def _items_block(expense: ExpenseEmailData) -> str:
    if not expense.items:
        return ""
    currency = escape(expense.currency)
    rows = "".join(
        '        <div style="display: flex; justify-content: space-between; padding: 4px 0; border-bottom: 1px solid #e2e8f0;">\n'
        f"          <span>{escape(item.name)} (x{item.quantity:g})</span>\n"
        f"          <span>{currency} {item.price:.2f}</span>\n"
        "        </div>\n"
        for item in expense.items
    )
    return (
        '      <div class="items">\n'
        '        <div class="label" style="margin-bottom: 8px;">Articoli</div>\n'
        f"{rows}"
        "      </div>\n"
    )


def build_subject(expense: ExpenseEmailData) -> str:
    return f"Nota Spese: {expense.merchant or 'Nuova spesa'} - {expense.currency} {expense.total:.2f}"


def render_expense_email(expense: ExpenseEmailData) -> str:
    """Fixed HTML body of the expense email; every interpolated value is escaped."""
    formatted_date = format_long_date(expense.date) or "Data non disponibile"
    return (
        "<!DOCTYPE html>\n"
        "<html>\n"
        "<head>\n"
        '  <meta charset="utf-8">\n'
        f"  <style>{_STYLE}  </style>\n"
        "</head>\n"
        "<body>\n"
        '  <div class="container">\n'
        '    <div class="header">\n'
        '      <h1 style="margin: 0; font-size: 20px;">📝 Nota Spese</h1>\n'
        '      <p style="margin: 8px 0 0; opacity: 0.8;">Nuova spesa registrata</p>\n'
        "    </div>\n"
        '    <div class="content">\n'
        + _field("Esercente", escape(expense.merchant or "Non specificato"))
        + _field("Data", escape(formatted_date))
        + _field("Categoria", escape(expense.category or "Non categorizzato"))
        + _field("Totale", f"{escape(expense.currency)} {expense.total:.2f}", css_class="total")
        + _items_block(expense)
        + "    </div>\n"
        '    <div class="footer">\n'
        "      Inviato tramite Nota Spese App\n"
        "    </div>\n"
        "  </div>\n"
        "</body>\n"
        "</html>\n"
    )
