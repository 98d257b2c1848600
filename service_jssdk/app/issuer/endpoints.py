"""
Issuer endpoint builders.

Standard accounts and corporate accounts obtain credentials from different
hosts with different parameter names; the refresh algorithm only ever sees
an ``IssuerEndpoints``.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Dict

from ..config import JSSDKOptions


@dataclass(frozen=True)
class IssuerRequest:
    """A GET request against the issuer."""

    url: str
    params: Dict[str, str] = field(default_factory=dict)


class IssuerEndpoints(ABC):
    """Builds issuer requests for one credential identity."""

    def __init__(self, app_id: str, secret: str):
        self.app_id = app_id
        self.secret = secret

    @abstractmethod
    def token_request(self) -> IssuerRequest:
        """Request for a new access token."""

    @abstractmethod
    def ticket_request(self, access_token: str) -> IssuerRequest:
        """Request for a new ticket, authorized by ``access_token``."""


class StandardEndpoints(IssuerEndpoints):
    TOKEN_URL = "https://api.weixin.qq.com/cgi-bin/token"
    TICKET_URL = "https://api.weixin.qq.com/cgi-bin/ticket/getticket"

    def token_request(self) -> IssuerRequest:
        return IssuerRequest(
            self.TOKEN_URL,
            {"grant_type": "client_credential", "appid": self.app_id, "secret": self.secret},
        )

    def ticket_request(self, access_token: str) -> IssuerRequest:
        return IssuerRequest(self.TICKET_URL, {"type": "jsapi", "access_token": access_token})


class CorpEndpoints(IssuerEndpoints):
    TOKEN_URL = "https://qyapi.weixin.qq.com/cgi-bin/gettoken"
    TICKET_URL = "https://qyapi.weixin.qq.com/cgi-bin/get_jsapi_ticket"

    def token_request(self) -> IssuerRequest:
        return IssuerRequest(self.TOKEN_URL, {"corpid": self.app_id, "corpsecret": self.secret})

    def ticket_request(self, access_token: str) -> IssuerRequest:
        return IssuerRequest(self.TICKET_URL, {"access_token": access_token})


def endpoints_for(options: JSSDKOptions) -> IssuerEndpoints:
    """Pick the endpoint variant for the configured account type."""
    endpoints_cls = CorpEndpoints if options.corp else StandardEndpoints
    return endpoints_cls(options.app_id, options.secret)
