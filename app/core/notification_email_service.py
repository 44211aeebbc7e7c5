"""
Emaily zákazníkům při změně stavu objednávky.
"""
import html
from decimal import Decimal
from typing import List, Dict, Optional
from core.email_service import EmailService
from models.order import Order, OrderStatus


# Nezlomitelná mezera jako v cs-CZ formátu čísel
NBSP = "\u00a0"


def format_czk(amount) -> str:
    """
    Cena v českém formátu: nezlomitelná mezera jako oddělovač tisíců
    i před měnou, desetinná čárka, bez nulových desetin ("1 234 Kč", "12,5 Kč").
    """
    value = Decimal(str(amount)).quantize(Decimal("0.01"))
    whole, _, fraction = f"{value:,.2f}".partition(".")
    whole = whole.replace(",", NBSP)
    fraction = fraction.rstrip("0")
    if fraction:
        return f"{whole},{fraction}{NBSP}Kč"
    return f"{whole}{NBSP}Kč"


# (předmět, text, nadpis HTML, zpráva HTML) podle stavu; BAKING se neoznamuje
STATUS_TEMPLATES = {
    OrderStatus.PENDING: (
        "Přijata ke zpracování",
        "Dobrý den, děkujeme za vaši objednávku #{number}. Čeká na potvrzení pekařem.",
        "Objednávka přijata",
        "Dobrý den,<br>děkujeme za vaši objednávku. Nyní čeká na potvrzení naším pekařem. "
        "Jakmile ji schválíme, dáme vám vědět.",
    ),
    OrderStatus.CONFIRMED: (
        "Potvrzena a pečeme",
        "Dobrý den, vaše objednávka #{number} byla schválena a začínáme na ní pracovat.",
        "Objednávka potvrzena",
        "Dobrý den,<br>máme dobrou zprávu! Vaše objednávka byla schválena a právě začínáme "
        "připravovat vaše pečivo.",
    ),
    OrderStatus.READY: (
        "Připraveno k vyzvednutí",
        "Dobrý den, vaše pečivo z objednávky #{number} je připraveno k vyzvednutí.",
        "Pečivo je připraveno",
        "Dobrý den,<br>vaše pečivo je čerstvě upečené a připravené k vyzvednutí "
        "(nebo na cestě k vám, dle domluvy).",
    ),
    OrderStatus.COMPLETED: (
        "Dokončeno",
        "Děkujeme za nákup. Objednávka #{number} byla úspěšně dokončena.",
        "Děkujeme za nákup",
        "Dobrý den,<br>objednávka byla úspěšně předána. Doufáme, že vám bude chutnat!",
    ),
    OrderStatus.CANCELLED: (
        "Stornována",
        "Dobrý den, vaše objednávka #{number} byla bohužel stornována.",
        "Objednávka stornována",
        "Dobrý den,<br>je nám líto, ale vaše objednávka musela být stornována. "
        "Pokud máte dotazy, kontaktujte nás prosím.",
    ),
}


def _render_html(title: str, message: str, items: List[Dict], total_price, order_number: str) -> str:
    rows = "".join(
        f"""
        <tr>
            <td style="padding: 8px; border-bottom: 1px solid #eee;">{html.escape(item['product_name'])}</td>
            <td style="padding: 8px; border-bottom: 1px solid #eee; text-align: center;">{item['quantity']} ks</td>
            <td style="padding: 8px; border-bottom: 1px solid #eee; text-align: right;">{format_czk(Decimal(str(item['price'])) * item['quantity'])}</td>
        </tr>"""
        for item in items
    )

    return f"""
    <div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto; padding: 20px; color: #333;">
        <h1 style="color: #d97706; font-size: 24px; margin-bottom: 10px;">Pekařství Bánov</h1>
        <h2 style="font-size: 20px; color: #111;">{title} – objednávka #{order_number}</h2>

        <p style="font-size: 16px; line-height: 1.5; margin: 20px 0;">
            {message}
        </p>

        <div style="background-color: #f9fafb; padding: 15px; border-radius: 8px; margin-top: 20px;">
            <h3 style="margin-top: 0; font-size: 16px;">Rekapitulace objednávky:</h3>
            <table style="width: 100%; border-collapse: collapse; font-size: 14px;">
                <thead>
                    <tr>
                        <th style="text-align: left; padding: 8px; border-bottom: 2px solid #ddd;">Pečivo</th>
                        <th style="text-align: center; padding: 8px; border-bottom: 2px solid #ddd;">Počet</th>
                        <th style="text-align: right; padding: 8px; border-bottom: 2px solid #ddd;">Cena</th>
                    </tr>
                </thead>
                <tbody>{rows}
                </tbody>
                <tfoot>
                    <tr>
                        <td colspan="2" style="text-align: right; padding: 12px 8px; font-weight: bold;">Celkem k úhradě:</td>
                        <td style="text-align: right; padding: 12px 8px; font-weight: bold; color: #d97706;">{format_czk(total_price)}</td>
                    </tr>
                </tfoot>
            </table>
        </div>

        <p style="font-size: 12px; color: #666; margin-top: 30px; text-align: center;">
            Děkujeme, že u nás nakupujete.<br>
            Tým Pekařství Bánov
        </p>
    </div>
    """


def get_order_status_email_content(
    order_number: str,
    status: OrderStatus,
    items: List[Dict],
    total_price
) -> Optional[Dict[str, str]]:
    """
    Sestavit email pro daný stav objednávky.

    Args:
        items: [{product_name, quantity, price}]

    Returns:
        {subject, text, html}, nebo None pro stav bez oznámení (BAKING)
    """
    template = STATUS_TEMPLATES.get(status)
    if template is None:
        return None

    subject_suffix, text, title, message = template
    return {
        "subject": f"Objednávka {order_number}: {subject_suffix}",
        "text": text.format(number=order_number),
        "html": _render_html(title, message, items, total_price, order_number),
    }


class OrderNotificationService(EmailService):
    """
    Oznámení o objednávkách. Rozšiřuje EmailService (stejné SMTP nastavení).
    """

    async def send_order_status_email(self, order: Order, status: Optional[OrderStatus] = None) -> bool:
        """
        Poslat zákazníkovi email o stavu objednávky.

        Returns:
            bool: False, pokud se email nepodařilo odeslat. Stav bez šablony vrací True.
        """
        items = [
            {
                "product_name": item.product.name if item.product else f"Produkt {item.product_id}",
                "quantity": item.quantity,
                "price": item.price,
            }
            for item in order.items
        ]

        content = get_order_status_email_content(
            order_number=order.order_number,
            status=status or order.status,
            items=items,
            total_price=order.total_price
        )
        if content is None:
            return True

        return await self.send_email(
            to_email=order.user.email,
            subject=content["subject"],
            plain_content=content["text"],
            html_content=content["html"]
        )


order_notification_service = OrderNotificationService()
