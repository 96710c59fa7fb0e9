"""Shared route dependencies: notifier lookup and body parsing.

Learn: Mutation endpoints accept either an HTML-form body (what a plain
<form method="post"> sends) or a JSON object. Both end up as the same flat
dict of raw fields, which the services validate.
"""

from typing import Any

from fastapi import Request

from boxoffice.errors import ValidationError
from boxoffice.realtime.notifier import Notifier


def get_notifier(request: Request) -> Notifier:
    """The process-wide notifier created in the app lifespan."""
    return request.app.state.notifier


async def request_fields(request: Request) -> dict[str, Any]:
    content_type = request.headers.get("content-type", "")
    if content_type.startswith("application/json"):
        try:
            body = await request.json()
        except ValueError as e:
            raise ValidationError("Request body is not valid JSON") from e
        if not isinstance(body, dict):
            raise ValidationError("Request body must be a JSON object")
        return body

    form = await request.form()
    return dict(form)
