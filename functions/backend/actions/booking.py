"""
Booking inquiries from the public contact form, forwarded by email.
"""

from __future__ import annotations

import logging
import smtplib

from backend.actions.common import is_email
from backend.dependencies import Services
from backend.errors import ValidationError
from shared.api import ActionResult, BookingInquiry
from shared.constants import (
    MAX_BOOKING_MESSAGE_LENGTH,
    MIN_BOOKING_EVENT_TYPE_LENGTH,
    MIN_BOOKING_MESSAGE_LENGTH,
    MIN_BOOKING_NAME_LENGTH,
)

logger = logging.getLogger(__name__)


def validate_booking_inquiry(inquiry: BookingInquiry) -> None:
    if len(inquiry.name.strip()) < MIN_BOOKING_NAME_LENGTH:
        raise ValidationError("El nombre es requerido.")
    if not is_email(inquiry.email.strip()):
        raise ValidationError("Por favor, introduce un email válido.")
    if len(inquiry.event_type.strip()) < MIN_BOOKING_EVENT_TYPE_LENGTH:
        raise ValidationError("El tipo de evento es requerido.")
    if not inquiry.event_date.strip():
        raise ValidationError("La fecha del evento es requerida.")
    message = inquiry.message.strip()
    if len(message) < MIN_BOOKING_MESSAGE_LENGTH:
        raise ValidationError("Por favor, proporciona más detalles en tu mensaje.")
    if len(message) > MAX_BOOKING_MESSAGE_LENGTH:
        raise ValidationError("El mensaje no puede exceder los 1000 caracteres.")


def format_booking_email(band_name: str, inquiry: BookingInquiry) -> tuple[str, str]:
    subject = f"Solicitud de contratación: {inquiry.event_type} ({inquiry.event_date})"
    lines = [
        f"Nueva solicitud de contratación para {band_name}",
        "",
        f"Nombre: {inquiry.name}",
        f"Email: {inquiry.email}",
        f"Teléfono: {inquiry.phone or '-'}",
        f"Tipo de evento: {inquiry.event_type}",
        f"Fecha del evento: {inquiry.event_date}",
        "",
        "Mensaje:",
        inquiry.message,
    ]
    return subject, "\n".join(lines)


def send_booking_inquiry(services: Services, inquiry: BookingInquiry) -> ActionResult:
    """
    Validates the inquiry and emails it to the band.

    Raises:
        ConfigurationError: If SMTP delivery is not configured.
    """
    try:
        validate_booking_inquiry(inquiry)
    except ValidationError as e:
        return ActionResult(success=False, error=str(e))

    subject, body = format_booking_email(services.settings.band_name, inquiry)
    try:
        services.mailer.send(subject, body, reply_to=inquiry.email.strip())
    except (smtplib.SMTPException, OSError) as e:
        logger.error("Failed to send booking inquiry from %s: %s", inquiry.email, e)
        return ActionResult(
            success=False,
            error="No se pudo enviar tu solicitud. Por favor, inténtalo de nuevo más tarde.",
        )
    return ActionResult(success=True)
