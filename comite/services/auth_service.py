"""
Reader authentication service
"""
import logging
from typing import Optional
from firebase_admin import auth as firebase_auth

from ..core.firebase_config import initialize_firebase

logger = logging.getLogger(__name__)


class AuthService:
    """Service for verifying reader identity tokens"""

    def __init__(self):
        initialize_firebase()

    def verify_firebase_token(self, id_token: str) -> Optional[dict]:
        """Verify Firebase ID token"""
        try:
            return firebase_auth.verify_id_token(id_token)
        except Exception as e:
            logger.warning(f"Error verifying Firebase token: {e}")
            return None
