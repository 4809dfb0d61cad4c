"""Webhook handler for the Telegram Bot API."""
from __future__ import annotations

import hmac
import logging

from fastapi import APIRouter, BackgroundTasks, Depends, Header, HTTPException, Request
from pydantic import ValidationError

from imagebot.models import TelegramMessage, TelegramUpdate, UploadDescriptor
from imagebot.services import BotServices
from imagebot.services.image_generator import VALID_SIZES, InvalidSizeError

router = APIRouter()
logger = logging.getLogger(__name__)

IMAGE_COMMAND = "/image"
GENERATION_FAILED_REPLY = "Sorry, the image could not be generated. Please try again later."
UPLOAD_FAILED_REPLY = "Sorry, the image could not be processed. Please try again later."


def get_services(request: Request) -> BotServices:
    return request.app.state.services


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def verify_secret_token(expected: str | None, received: str | None) -> None:
    if expected is None:
        return
    if received is None:
        raise HTTPException(status_code=403, detail="Missing secret token header")
    if not hmac.compare_digest(expected, received):
        raise HTTPException(status_code=403, detail="Invalid secret token")


def parse_image_command(text: str) -> tuple[str, str] | None:
    """Split ``/image [size] prompt`` into (prompt, size).

    A leading ``WxH`` token is taken as the size even when it is not a valid
    one, so the generator can reject it.
    """
    command, _, rest = text.strip().partition(" ")
    if command.split("@", 1)[0] != IMAGE_COMMAND:
        return None
    rest = rest.strip()
    first, _, remainder = rest.partition(" ")
    if "x" in first and first.replace("x", "", 1).isdigit():
        return remainder.strip(), first
    return rest, VALID_SIZES[0]


# ---------------------------------------------------------------------------
# POST webhook
# ---------------------------------------------------------------------------


@router.post("/webhook")
async def receive_webhook(
    request: Request,
    background_tasks: BackgroundTasks,
    services: BotServices = Depends(get_services),
    secret_token: str | None = Header(None, alias="X-Telegram-Bot-Api-Secret-Token"),
):
    verify_secret_token(services.settings.telegram_webhook_secret, secret_token)

    payload = await request.json()
    logger.debug("Webhook payload: %s", payload)

    try:
        update = TelegramUpdate.model_validate(payload)
    except ValidationError as exc:
        logger.error("Malformed webhook payload: %s", exc)
        raise HTTPException(status_code=400, detail="Bad payload")

    msg = update.message
    if msg is None:
        return {"status": "ignored"}

    command = parse_image_command(msg.text) if msg.text else None
    if msg.image_file_id is not None:
        background_tasks.add_task(run_upload, services, msg)
    elif command is not None:
        prompt, size = command
        background_tasks.add_task(run_generation, services, msg.chat.id, prompt, size)
    else:
        logger.info("Unsupported message in chat %s", msg.chat.id)
        return {"status": "ignored"}

    return {"status": "received"}


async def run_generation(services: BotServices, chat_id: int, prompt: str, size: str) -> None:
    telegram = services.telegram
    if not prompt:
        await telegram.send_message(chat_id, f"Usage: {IMAGE_COMMAND} [size] <prompt>")
        return
    try:
        url = await services.image_generator.generate(prompt, size)
    except InvalidSizeError as exc:
        await telegram.send_message(chat_id, str(exc))
        return
    except Exception as exc:  # pylint: disable=broad-except
        logger.exception("Image generation for chat %s failed: %s", chat_id, exc)
        await telegram.send_message(chat_id, GENERATION_FAILED_REPLY)
        return
    await telegram.send_photo(chat_id, url, caption=prompt)


async def run_upload(services: BotServices, msg: TelegramMessage) -> None:
    settings = services.settings
    telegram = services.telegram
    try:
        file_info = await telegram.get_file(msg.image_file_id)
        descriptor = UploadDescriptor.model_validate(file_info)
        prompt = (msg.caption or "").strip() or settings.default_analysis_prompt
        result = await services.upload_processor.handle_upload(descriptor, prompt, settings.openai_model)
    except Exception as exc:  # pylint: disable=broad-except
        logger.exception("Upload handling for chat %s failed: %s", msg.chat.id, exc)
        await telegram.send_message(msg.chat.id, UPLOAD_FAILED_REPLY)
        return
    logger.info("Upload %s finished: %s", descriptor.file_id, result.kind.value)
    await telegram.send_message(msg.chat.id, result.text)
