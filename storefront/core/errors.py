"""Error kinds raised by the services and how they reach the client.

Every failure a handler can produce is one of the classes below. The HTTP
layer turns them into ``{"status": "error", "error": code, "message": text}``
with the message looked up for the configured locale.
"""
import logging
from typing import Optional

from fastapi import Request, status
from fastapi.responses import JSONResponse

from storefront.core.config import get_settings

logger = logging.getLogger(__name__)


class StorefrontError(Exception):
    code = "internal_error"
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    message = "Internal server error."

    def __init__(self, message: Optional[str] = None):
        super().__init__(message or self.message)
        self.detail = message


class MissingFieldError(StorefrontError):
    code = "missing_field"
    status_code = status.HTTP_400_BAD_REQUEST
    message = "Please fill in all fields."


class MissingEmailError(StorefrontError):
    code = "missing_email"
    status_code = status.HTTP_400_BAD_REQUEST
    message = "Email not found."


class InvalidCredentialsError(StorefrontError):
    code = "invalid_credentials"
    status_code = status.HTTP_401_UNAUTHORIZED
    message = "Incorrect password."


class SocialOnlyAccountError(StorefrontError):
    code = "social_only_account"
    status_code = status.HTTP_401_UNAUTHORIZED
    message = "This email is registered with social login. Sign in with Google."


class UserCreationError(StorefrontError):
    code = "user_creation_failed"
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    message = "Could not create user."


class Unauthenticated(StorefrontError):
    code = "unauthenticated"
    status_code = status.HTTP_401_UNAUTHORIZED
    message = "Not authenticated."


class UserNotFound(StorefrontError):
    code = "user_not_found"
    status_code = status.HTTP_404_NOT_FOUND
    message = "User not found."


class OrderNotFound(StorefrontError):
    code = "order_not_found"
    status_code = status.HTTP_404_NOT_FOUND
    message = "Order not found."


class Forbidden(StorefrontError):
    code = "forbidden"
    status_code = status.HTTP_403_FORBIDDEN
    message = "Access denied."


class ValidationError(StorefrontError):
    code = "validation_error"
    status_code = status.HTTP_400_BAD_REQUEST
    message = "Invalid request."


class NoValidImages(StorefrontError):
    code = "no_valid_images"
    status_code = status.HTTP_400_BAD_REQUEST
    message = "No valid image was uploaded."


class NotFound(StorefrontError):
    code = "not_found"
    status_code = status.HTTP_404_NOT_FOUND
    message = "Not found."


class InternalError(StorefrontError):
    pass


# Localized defaults. A message passed explicitly to the exception is kept
# only for the "en" locale, other locales always use the table.
MESSAGES = {
    "pt-BR": {
        "missing_field": "Por favor, preencha todos os campos.",
        "missing_email": "Email não encontrado.",
        "invalid_credentials": "Senha incorreta.",
        "social_only_account": "Este e-mail está registrado com login social. Use o Google para entrar.",
        "user_creation_failed": "Erro ao criar usuário.",
        "unauthenticated": "Não autenticado.",
        "user_not_found": "Usuário não encontrado.",
        "order_not_found": "Pedido não encontrado.",
        "forbidden": "Acesso negado.",
        "validation_error": "Requisição inválida.",
        "no_valid_images": "Nenhuma imagem válida foi enviada.",
        "not_found": "Não encontrado.",
        "internal_error": "Erro interno no servidor.",
    },
}


def localize(exc: StorefrontError, locale: str) -> str:
    table = MESSAGES.get(locale)
    if table is None:
        return exc.detail or exc.message
    return table.get(exc.code, exc.message)


def error_response(exc: StorefrontError, locale: str) -> JSONResponse:
    headers = None
    if exc.status_code == status.HTTP_401_UNAUTHORIZED:
        headers = {"WWW-Authenticate": "Bearer"}
    return JSONResponse(
        status_code=exc.status_code,
        content={"status": "error", "error": exc.code, "message": localize(exc, locale)},
        headers=headers,
    )


async def storefront_error_handler(request: Request, exc: StorefrontError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc)
    return error_response(exc, get_settings().locale)


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return error_response(InternalError(), get_settings().locale)
