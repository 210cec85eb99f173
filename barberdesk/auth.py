from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Mapping, MutableMapping, Optional

from email_validator import validate_email as _validate_email, EmailNotValidError

from barberdesk.tenant import Barbershop, fetch_barbershop_by_id
from datastore import models
from datastore.database import DatastoreError, fetch_one

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 6

INVALID_LINK_MESSAGE = "O link de recuperação é inválido ou expirou."
SESSION_FAILED_MESSAGE = "Não foi possível validar o link de recuperação."
NO_LINK_MESSAGE = "Nenhum link de recuperação válido encontrado. Solicite um novo link."
UNEXPECTED_MESSAGE = "Ocorreu um erro ao processar o link de recuperação."

RECOVERY_PARAMS = ("access_token", "refresh_token", "type", "error_code", "error_description")

# per-user data kept in the session; dropped whenever the signed-in user changes
SESSION_CACHE_KEYS = ("admin_barbershop_id", "admin_barbershop", "schedule_drafts")


@dataclass
class AuthResult:
    success: bool
    error: Optional[str] = None
    user: Any = None


class RecoveryState(str, Enum):
    LOADING = "loading"
    VALID = "valid"
    INVALID = "invalid"
    ERROR = "error"


@dataclass
class RecoveryCheck:
    state: RecoveryState
    message: str = ""
    # the tokens were consumed and should be removed from the URL
    clear_params: bool = False


# ----------------- VALIDATORS ------------------------

def validate_email_address(email: str) -> bool:
    try:
        _validate_email(email, check_deliverability=False)
        return True
    except EmailNotValidError:
        return False


def validate_new_password(password: str, confirm: str) -> Optional[str]:
    if not (password or "").strip() or not (confirm or "").strip():
        return "Por favor, preencha todos os campos."
    if len(password) < MIN_PASSWORD_LENGTH:
        return f"A senha deve ter pelo menos {MIN_PASSWORD_LENGTH} caracteres."
    if password != confirm:
        return "As senhas não coincidem."
    return None


def _error_message(e: Exception, fallback: str) -> str:
    message = getattr(e, "message", None) or str(e)
    return message or fallback


# ----------------- SIGN IN / OUT ------------------------

def sign_in(client, state: MutableMapping, email: str, password: str) -> AuthResult:
    email = (email or "").strip()
    if not email or not password:
        return AuthResult(False, "Por favor, preencha todos os campos.")
    if not validate_email_address(email):
        return AuthResult(False, "Email inválido.")

    try:
        response = client.auth.sign_in_with_password({"email": email, "password": password})
    except Exception as e:
        logger.warning(f"Sign-in failed for {email}: {e}")
        return AuthResult(False, "Email ou senha incorretos.")

    user = getattr(response, "user", None)
    if user is None:
        return AuthResult(False, "Email ou senha incorretos.")

    clear_session_caches(state)
    state["auth_user"] = user
    logger.info(f"User {user.id} signed in")
    return AuthResult(True, user=user)


def sign_out(client, state: MutableMapping) -> None:
    try:
        client.auth.sign_out()
    except Exception as e:
        logger.warning(f"Sign-out request failed: {e}")
    state.pop("auth_user", None)
    clear_session_caches(state)


def clear_session_caches(state: MutableMapping) -> None:
    for key in SESSION_CACHE_KEYS:
        state.pop(key, None)


def current_user(state: Mapping):
    return state.get("auth_user")


def _query_admin_barbershop_id(client, user_id: str) -> Optional[str]:
    row = fetch_one(
        client.table(models.USER_ROLES)
        .select("barbershop_id")
        .eq("user_id", user_id)
        .eq("role", "admin")
    )
    return row.get("barbershop_id") if row else None


def fetch_admin_barbershop_id(client, user_id: Optional[str]) -> Optional[str]:
    if not user_id:
        return None
    try:
        return _query_admin_barbershop_id(client, user_id)
    except DatastoreError as e:
        logger.error(f"Failed to load admin role for {user_id}: {e.message}")
        return None


def admin_barbershop_id(client, state: MutableMapping) -> Optional[str]:
    """Tenant administered by the signed-in user, cached for the session."""
    user = current_user(state)
    if user is None:
        return None
    if "admin_barbershop_id" not in state:
        # a failed lookup is retried on the next call
        try:
            state["admin_barbershop_id"] = _query_admin_barbershop_id(client, user.id)
        except DatastoreError as e:
            logger.error(f"Failed to load admin role for {user.id}: {e.message}")
            return None
    return state["admin_barbershop_id"]


def admin_barbershop(client, state: MutableMapping) -> Optional[Barbershop]:
    """
    Barbershop administered by the signed-in user. Schedule drafts belong to
    the cached barbershop and are dropped when it changes.
    """
    barbershop_id = admin_barbershop_id(client, state)
    if not barbershop_id:
        return None

    cached = state.get("admin_barbershop")
    if cached is not None and cached.id == barbershop_id:
        return cached

    if cached is not None:
        state.pop("schedule_drafts", None)
    state["admin_barbershop"] = fetch_barbershop_by_id(client, barbershop_id)
    return state["admin_barbershop"]


# ----------------- PASSWORD RESET ------------------------

def request_password_reset(client, email: str, redirect_to: str) -> AuthResult:
    email = (email or "").strip()
    if not validate_email_address(email):
        return AuthResult(False, "Email inválido.")
    try:
        client.auth.reset_password_for_email(email, {"redirect_to": redirect_to})
    except Exception as e:
        logger.error(f"Password reset request failed for {email}: {e}")
        return AuthResult(False, "Não foi possível enviar o link de recuperação.")
    return AuthResult(True)


def check_recovery_session(auth, params: Mapping[str, str]) -> RecoveryCheck:
    try:
        error_code = params.get("error_code")
        error_description = params.get("error_description")

        # expired or invalid token reported by the auth server
        if error_code or error_description:
            logger.error(f"Recovery error: {error_code} {error_description}")
            return RecoveryCheck(RecoveryState.INVALID, error_description or INVALID_LINK_MESSAGE)

        access_token = params.get("access_token")
        refresh_token = params.get("refresh_token")
        if access_token and refresh_token and params.get("type") == "recovery":
            try:
                auth.set_session(access_token, refresh_token)
            except Exception as e:
                logger.error(f"Error setting recovery session: {e}")
                return RecoveryCheck(RecoveryState.INVALID, SESSION_FAILED_MESSAGE)
            return RecoveryCheck(RecoveryState.VALID, clear_params=True)

        # the page may have been reloaded after the tokens were consumed
        if auth.get_session():
            return RecoveryCheck(RecoveryState.VALID)

        return RecoveryCheck(RecoveryState.INVALID, NO_LINK_MESSAGE)
    except Exception as e:
        logger.exception(f"Error initializing recovery: {e}")
        return RecoveryCheck(RecoveryState.ERROR, UNEXPECTED_MESSAGE)


def reset_password(client, password: str, confirm: str) -> AuthResult:
    error = validate_new_password(password, confirm)
    if error:
        return AuthResult(False, error)

    try:
        client.auth.update_user({"password": password})
    except Exception as e:
        logger.error(f"Password update failed: {e}")
        return AuthResult(False, _error_message(e, "Não foi possível redefinir a senha."))

    # the recovery session must not stay signed in
    try:
        client.auth.sign_out()
    except Exception as e:
        logger.warning(f"Sign-out after password reset failed: {e}")

    return AuthResult(True)
