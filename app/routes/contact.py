"""
Kontaktní formulář z webu.
"""
from fastapi import APIRouter, HTTPException, status

from core.email_service import email_service
from schemas.contact import ContactMessage

router = APIRouter(prefix="/contact", tags=["contact"])


@router.post("")
async def send_contact_message(message: ContactMessage):
    """
    Přeposlat dotaz do schránky pekárny; odpověď půjde přímo odesílateli.
    """
    sent = await email_service.send_contact_message(
        name=message.name,
        email=message.email,
        message=message.message
    )

    if not sent:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={
                "success": False,
                "status_code": 500,
                "message": "Zprávu se nepodařilo odeslat. Zkuste to prosím později nebo nám zavolejte.",
                "error": "EMAIL_SEND_FAILED"
            }
        )

    return {
        "success": True,
        "status_code": 200,
        "message": "Děkujeme, vaše zpráva byla odeslána"
    }
