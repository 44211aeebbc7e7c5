"""
Odesílání emailů přes SMTP (aiosmtplib).

Bez nastaveného SMTP_HOST se email neodesílá, jen se zaloguje
a odeslání se považuje za úspěšné (lokální vývoj).
"""
import logging
import aiosmtplib
from email.mime.text import MIMEText
from email.mime.multipart import MIMEMultipart
from typing import Optional
from core.config import settings

logger = logging.getLogger(__name__)


class EmailService:
    """Služba pro odesílání emailů."""

    def __init__(self):
        self.smtp_host = settings.SMTP_HOST
        self.smtp_port = settings.SMTP_PORT
        self.smtp_user = settings.SMTP_USER
        self.smtp_password = settings.SMTP_PASSWORD
        self.from_email = settings.FROM_EMAIL
        self.from_name = settings.FROM_NAME
        self.frontend_url = settings.FRONTEND_URL

    def _build_message(
        self,
        to_email: str,
        subject: str,
        html_content: Optional[str],
        plain_content: str,
        reply_to: Optional[str]
    ) -> MIMEMultipart:
        message = MIMEMultipart("alternative")
        message["Subject"] = subject
        message["From"] = f"{self.from_name} <{self.from_email}>"
        message["To"] = to_email
        if reply_to:
            message["Reply-To"] = reply_to

        message.attach(MIMEText(plain_content, "plain", "utf-8"))
        if html_content:
            message.attach(MIMEText(html_content, "html", "utf-8"))
        return message

    async def send_email(
        self,
        to_email: str,
        subject: str,
        plain_content: str,
        html_content: Optional[str] = None,
        reply_to: Optional[str] = None
    ) -> bool:
        """
        Odeslat email.

        Args:
            to_email: Adresát
            subject: Předmět
            plain_content: Textová verze
            html_content: HTML verze (volitelné)
            reply_to: Adresa pro odpověď (kontaktní formulář)

        Returns:
            bool: True, pokud se email odeslal (nebo jen zalogoval)
        """
        if not self.smtp_host:
            logger.info("SMTP není nastaveno, email se neodesílá. To: %s | Subject: %s", to_email, subject)
            return True

        message = self._build_message(to_email, subject, html_content, plain_content, reply_to)

        params = {"hostname": self.smtp_host, "port": self.smtp_port}
        if self.smtp_user and self.smtp_password:
            params.update(username=self.smtp_user, password=self.smtp_password)
            # Port 465 = přímé SSL, jinak STARTTLS
            if self.smtp_port == 465:
                params["use_tls"] = True
            else:
                params["start_tls"] = True

        try:
            await aiosmtplib.send(message, **params)
        except (aiosmtplib.SMTPException, OSError) as e:
            logger.error("Chyba při odesílání emailu na %s: %s", to_email, e)
            return False

        logger.info("Email odeslán: %s | %s", to_email, subject)
        return True

    async def send_password_reset_email(
        self,
        to_email: str,
        full_name: Optional[str],
        reset_token: str
    ) -> bool:
        """
        Odeslat odkaz pro obnovení hesla.
        """
        reset_url = f"{self.frontend_url}/obnovit-heslo?token={reset_token}"
        hours = settings.PASSWORD_RESET_EXPIRE_HOURS
        greeting = f"Dobrý den, {full_name}," if full_name else "Dobrý den,"

        subject = "Obnovení hesla - Pekařství Bánov"

        plain_content = (
            f"{greeting}\n\n"
            f"obdrželi jsme žádost o obnovení hesla k vašemu účtu.\n"
            f"Nové heslo nastavíte na adrese: {reset_url}\n\n"
            f"Odkaz je platný {hours} h. Pokud jste o obnovení nežádali, email ignorujte.\n\n"
            f"Tým Pekařství Bánov"
        )

        html_content = f"""
        <div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto; padding: 20px; color: #333;">
            <h1 style="color: #d97706; font-size: 24px;">Pekařství Bánov</h1>
            <p style="font-size: 16px;">{greeting}</p>
            <p style="font-size: 16px; line-height: 1.5;">
                obdrželi jsme žádost o obnovení hesla k vašemu účtu.
            </p>
            <p style="text-align: center; margin: 30px 0;">
                <a href="{reset_url}" style="background-color: #d97706; color: white; padding: 12px 24px; text-decoration: none; border-radius: 6px; font-weight: bold;">
                    Nastavit nové heslo
                </a>
            </p>
            <p style="font-size: 12px; color: #666;">
                Odkaz je platný {hours} h. Pokud jste o obnovení nežádali, tento email ignorujte.
            </p>
        </div>
        """

        return await self.send_email(to_email, subject, plain_content, html_content)

    async def send_contact_message(self, name: str, email: str, message: str) -> bool:
        """
        Přeposlat dotaz z kontaktního formuláře do schránky pekárny.
        Odpověď půjde přímo odesílateli (Reply-To).
        """
        return await self.send_email(
            to_email=settings.CONTACT_EMAIL,
            subject=f"Nový dotaz z webu: {name}",
            plain_content=f"Jméno: {name}\nEmail: {email}\n\nZpráva:\n{message}",
            reply_to=email
        )


email_service = EmailService()
