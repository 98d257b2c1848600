"""
JSSDK service for the JSSDK Access Layer.
"""

from typing import Dict, Optional

from shared.base_service import BaseService
from shared.config import ServiceConfig
from .config import options_from_config
from .jssdk import JSSDK


class JSSDKService(BaseService):
    """JSSDK signing service implementation."""

    def __init__(self, config: Optional[ServiceConfig] = None, *, jssdk: Optional[JSSDK] = None):
        super().__init__("jssdk", 8020, config)
        self.jssdk = jssdk or JSSDK(options_from_config(self.config), metrics=self.metrics)
        self._setup_jssdk_routes()

    def _setup_jssdk_routes(self):
        """Set up signing routes."""

        @self.app.get("/")
        async def root():
            """Root endpoint."""
            return {
                "service": "jssdk",
                "message": "JSSDK Access Layer - Signing Service",
                "version": "1.0.0"
            }

        # Always HTTP 200; failures are reported through errCode.
        self.app.add_api_route(
            "/jssdk",
            self.jssdk.request_handler(),
            methods=["GET", "POST"],
            summary="Sign a page URL for the JS-SDK",
        )

    async def startup(self) -> None:
        await self.jssdk.start()
        self.logger.info(
            "JSSDK engine started",
            persistence=self.jssdk.options.type.value,
            corp=self.jssdk.options.corp,
        )

    async def shutdown(self) -> None:
        await self.jssdk.close()

    async def _check_dependencies(self) -> Dict[str, str]:
        """Check JSSDK dependencies."""
        return {
            "persistence": await self.jssdk.health(),
            "process_cache": "forced" if self.jssdk.credentials.cache_forced else "configured",
        }


def create_app(config: Optional[ServiceConfig] = None, jssdk: Optional[JSSDK] = None):
    """Create FastAPI application."""
    service = JSSDKService(config, jssdk=jssdk)
    return service.app


if __name__ == "__main__":
    service = JSSDKService()
    service.run()
