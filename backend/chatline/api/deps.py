from fastapi import Request

from chatline.core.config import Settings
from chatline.realtime.hub import RealtimeHub


def get_hub(request: Request) -> RealtimeHub:
    return request.app.state.hub


def get_settings(request: Request) -> Settings:
    return request.app.state.settings
