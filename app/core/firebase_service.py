"""
Firebase Admin SDK pro ověření přihlášení přes Google.
"""
import os
import logging
from typing import Dict
from firebase_admin import credentials, initialize_app, auth
from fastapi import HTTPException, status

logger = logging.getLogger(__name__)


def _auth_error(message: str, error: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail={
            "success": False,
            "status_code": 401,
            "message": message,
            "error": error
        }
    )


class FirebaseService:
    """Ověřování ID tokenů z Firebase (Google SSO)"""

    _initialized = False

    @classmethod
    def initialize(cls):
        """
        Inicializovat Firebase Admin SDK.

        Konfigurace:
        1. Soubor se service account klíčem (FIREBASE_CREDENTIALS_PATH)
        2. Jednotlivé proměnné prostředí (FIREBASE_PROJECT_ID, ...)
        Bez konfigurace zůstane Google přihlášení vypnuté.
        """
        if cls._initialized:
            return

        credentials_path = os.getenv("FIREBASE_CREDENTIALS_PATH")

        try:
            if credentials_path and os.path.exists(credentials_path):
                initialize_app(credentials.Certificate(credentials_path))
                logger.info("Firebase inicializován ze souboru %s", credentials_path)

            elif os.getenv("FIREBASE_PROJECT_ID"):
                cred_dict = {
                    "type": "service_account",
                    "project_id": os.getenv("FIREBASE_PROJECT_ID"),
                    "private_key_id": os.getenv("FIREBASE_PRIVATE_KEY_ID"),
                    "private_key": os.getenv("FIREBASE_PRIVATE_KEY", "").replace("\\n", "\n"),
                    "client_email": os.getenv("FIREBASE_CLIENT_EMAIL"),
                    "client_id": os.getenv("FIREBASE_CLIENT_ID"),
                    "auth_uri": "https://accounts.google.com/o/oauth2/auth",
                    "token_uri": "https://oauth2.googleapis.com/token",
                    "auth_provider_x509_cert_url": "https://www.googleapis.com/oauth2/v1/certs",
                    "client_x509_cert_url": os.getenv("FIREBASE_CERT_URL")
                }
                initialize_app(credentials.Certificate(cred_dict))
                logger.info("Firebase inicializován z proměnných prostředí")

            else:
                logger.warning("Firebase není nakonfigurován, přihlášení přes Google nebude dostupné")
                return

        except (ValueError, IOError) as e:
            logger.error("Chyba při inicializaci Firebase: %s", e)
            return

        cls._initialized = True

    @classmethod
    def verify_token(cls, firebase_token: str) -> Dict:
        """
        Ověřit Firebase ID token a vrátit údaje o uživateli.

        Returns:
            Dict s klíči uid, email, email_verified, name

        Raises:
            HTTPException: 503 bez konfigurace, 401 pro neplatný token
        """
        if not cls._initialized:
            raise HTTPException(
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                detail={
                    "success": False,
                    "status_code": 503,
                    "message": "Přihlášení přes Google není dostupné",
                    "error": "GOOGLE_AUTH_NOT_CONFIGURED"
                }
            )

        try:
            decoded_token = auth.verify_id_token(firebase_token)
        except auth.ExpiredIdTokenError:
            raise _auth_error("Platnost Google tokenu vypršela", "FIREBASE_TOKEN_EXPIRED")
        except auth.RevokedIdTokenError:
            raise _auth_error("Google token byl odvolán", "FIREBASE_TOKEN_REVOKED")
        except auth.InvalidIdTokenError:
            raise _auth_error("Neplatný Google token", "FIREBASE_TOKEN_INVALID")
        except Exception as e:
            logger.error("Chyba při ověření Firebase tokenu: %s", e)
            raise _auth_error("Google token se nepodařilo ověřit", "FIREBASE_VERIFICATION_FAILED")

        email = decoded_token.get("email") or ""
        return {
            "uid": decoded_token.get("uid"),
            "email": email,
            "email_verified": decoded_token.get("email_verified", False),
            "name": decoded_token.get("name") or email.split("@")[0],
        }


firebase_service = FirebaseService()
