"""Stage-based self-service process handler.

A process is an ordered list of stages. Reading the endpoint returns the
requirements of the first stage; each ``submitRequirements`` action checks
the input against the current stage and answers with the next stage's
requirements, or with an end tag once every stage has passed.

State is carried by a signed JWT (HS256) returned to the client with each
stage, so handlers keep no per-user state and may be shared across threads.
"""
from __future__ import annotations
import logging
import time
from typing import Any, Dict, List

import jwt

from ..exceptions import BadRequestError, NotSupportedError
from ..resources import (
    ActionRequest,
    ActionResponse,
    ReadRequest,
    RequestContext,
    Resource,
)
from .config import ConsoleConfig

logger = logging.getLogger(__name__)

JSON_SCHEMA = "http://json-schema.org/draft-04/schema#"
TOKEN_ALGORITHM = "HS256"
SUBMIT_ACTION = "submitRequirements"

STAGE_REQUIREMENTS: Dict[str, List[str]] = {
    "captcha": ["response"],
    "userQuery": ["queryFilter"],
    "emailValidation": ["code"],
    "emailUsername": [],
    "resetStage": ["password"],
    "userDetails": ["user"],
    "kbaSecurityAnswerVerificationStage": ["answer"],
}


def stage_requirements(stage: str) -> Dict[str, Any]:
    """JSON schema describing the input a stage expects."""
    required = STAGE_REQUIREMENTS.get(stage, [])
    return {
        "$schema": JSON_SCHEMA,
        "description": stage,
        "type": "object",
        "required": list(required),
        "properties": {name: {"type": "string"} for name in required},
    }


class ProcessRequestHandler:
    """Handler for one realm's self-service process."""

    def __init__(self, config: ConsoleConfig, realm: str, token_secret: str):
        self.config = config
        self.realm = realm
        self._token_secret = token_secret

    def handle_read(self, context: RequestContext, request: ReadRequest) -> Resource:
        content = self._stage_response(0)
        return Resource("1", "1.0", content)

    def handle_action(self, context: RequestContext, request: ActionRequest) -> ActionResponse:
        if request.action != SUBMIT_ACTION:
            raise NotSupportedError(f"Action {request.action} not supported")

        content = request.content or {}
        stage = self._current_stage(content.get("token"))
        self._check_input(self.config.stages[stage], content.get("input") or {})

        next_stage = stage + 1
        if next_stage >= len(self.config.stages):
            logger.info("Self-service process completed | service=%s | realm=%s", self.config.service, self.realm)
            return ActionResponse({
                "type": "selfservice",
                "tag": "end",
                "status": {"success": True},
                "additions": {},
            })
        return ActionResponse(self._stage_response(next_stage))

    def _stage_response(self, stage: int) -> Dict[str, Any]:
        name = self.config.stages[stage]
        response = {
            "type": name,
            "tag": "initial",
            "requirements": stage_requirements(name),
        }
        if stage > 0:
            response["token"] = self._issue_token(stage)
        return response

    def _issue_token(self, stage: int) -> str:
        now = int(time.time())
        claims = {
            "realm": self.realm,
            "service": self.config.service,
            "stage": stage,
            "iat": now,
            "exp": now + self.config.token_lifetime,
        }
        return jwt.encode(claims, self._token_secret, algorithm=TOKEN_ALGORITHM)

    def _current_stage(self, token: Any) -> int:
        if not token:
            return 0
        try:
            claims = jwt.decode(str(token), self._token_secret, algorithms=[TOKEN_ALGORITHM])
        except jwt.ExpiredSignatureError as exc:
            raise BadRequestError("Process token has expired", exc) from exc
        except jwt.InvalidTokenError as exc:
            raise BadRequestError("Invalid process token", exc) from exc

        if claims.get("realm") != self.realm or claims.get("service") != self.config.service:
            raise BadRequestError("Process token does not belong to this service")
        stage = claims.get("stage")
        if not isinstance(stage, int) or not 0 <= stage < len(self.config.stages):
            raise BadRequestError("Process token refers to an unknown stage")
        return stage

    @staticmethod
    def _check_input(stage: str, data: Dict[str, Any]) -> None:
        if not isinstance(data, dict):
            raise BadRequestError("input must be a JSON object")
        missing = [name for name in STAGE_REQUIREMENTS.get(stage, []) if not data.get(name)]
        if missing:
            raise BadRequestError(f"Missing requirements for stage {stage}: {', '.join(missing)}")


class ProcessServiceProvider:
    """Builds ``ProcessRequestHandler`` instances from console config."""

    def __init__(self, token_secret: str):
        self._token_secret = token_secret

    def is_service_enabled(self, config: ConsoleConfig) -> bool:
        return config.enabled and bool(config.stages)

    def get_service(self, config: ConsoleConfig, context: RequestContext, realm: str) -> ProcessRequestHandler:
        return ProcessRequestHandler(config, realm, self._token_secret)
