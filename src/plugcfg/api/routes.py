"""FastAPI routes and service wiring for plugcfg.

Exposes HTTP endpoints for:

- Reading the diagnostics report (`GET /health`)
- Running a full configuration pass (`POST /setup`)
- Configuring a single plugin and loading a single bundle on demand
- Looking up which bundle a plugin belongs to

Also provides `initialize_api()` to construct the orchestrator from
`Settings` and register it in a shared service container.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from ..base.loggable import Loggable
from ..config.settings import Settings
from ..core.health import HealthReport, format_health_report
from ..core.orchestrator import ConfigOrchestrator
from ..errors import ConfigDocumentError


class HealthResponse(BaseModel):
    """Diagnostics report plus its rendered lines.

    Attributes:
        report: Structured duplicates and failures.
        lines: Human-readable rendering of the report.
    """

    report: HealthReport
    lines: List[str]


class ConfigureResponse(BaseModel):
    plugin: str
    configured: bool
    errors_found: bool


class BundleLoadResponse(BaseModel):
    bundle: str
    loaded: bool


class BundleLookupResponse(BaseModel):
    plugin: str
    bundle: Optional[str] = None
    items: Optional[List[str]] = None


class APIServiceContainer(Loggable):
    """Holds the orchestrator used by the routes.

    Accessors raise HTTP 503 if not initialized.
    """

    def __init__(self) -> None:
        super().__init__()
        self.orchestrator: Optional[ConfigOrchestrator] = None

    def initialize(self, orchestrator: ConfigOrchestrator) -> None:
        self.orchestrator = orchestrator
        self.logger.info("API services initialized")

    def get_orchestrator(self) -> ConfigOrchestrator:
        """Return the orchestrator instance or raise HTTP 503 if unavailable."""
        if not self.orchestrator:
            raise HTTPException(status_code=503, detail="Orchestrator not initialized")
        return self.orchestrator


# Global service container
service_container = APIServiceContainer()
router = APIRouter(prefix="/api/v1")


def get_orchestrator() -> ConfigOrchestrator:
    """FastAPI dependency providing the initialized orchestrator instance."""
    return service_container.get_orchestrator()


def _health_response(orch: ConfigOrchestrator) -> HealthResponse:
    report = orch.health_report()
    return HealthResponse(report=report, lines=format_health_report(report))


@router.get("/health", response_model=HealthResponse)
async def health(orch: ConfigOrchestrator = Depends(get_orchestrator)):
    """Return every recorded duplicate configuration and load failure."""
    return _health_response(orch)


@router.post("/setup", response_model=HealthResponse)
async def run_setup(orch: ConfigOrchestrator = Depends(get_orchestrator)):
    """Run a configuration pass and return the resulting report.

    Raises:
        HTTPException: 422 if the configuration document is invalid.
    """
    try:
        orch.setup()
    except ConfigDocumentError as e:
        raise HTTPException(status_code=422, detail=str(e))
    return _health_response(orch)


@router.post("/plugins/{plugin_name}/configure", response_model=ConfigureResponse)
async def configure_plugin(
    plugin_name: str, orch: ConfigOrchestrator = Depends(get_orchestrator)
):
    """Configure one plugin declared in the document.

    Raises:
        HTTPException: 404 if the plugin is not declared.
    """
    try:
        document = orch.get_config()
    except ConfigDocumentError as e:
        raise HTTPException(status_code=422, detail=str(e))
    if document.get_plugin(plugin_name) is None:
        raise HTTPException(status_code=404, detail=f"Plugin {plugin_name} not found")

    orch.configure(plugin_name, document)
    return ConfigureResponse(
        plugin=plugin_name,
        configured=orch.state.is_configured(plugin_name),
        errors_found=orch.errors_found(),
    )


@router.post("/bundles/{bundle_name}/load", response_model=BundleLoadResponse)
async def load_bundle(bundle_name: str, orch: ConfigOrchestrator = Depends(get_orchestrator)):
    """Load one bundle's shared configuration module.

    Raises:
        HTTPException: 404 if the bundle is not declared.
    """
    try:
        document = orch.get_config()
    except ConfigDocumentError as e:
        raise HTTPException(status_code=422, detail=str(e))
    if document.get_bundle(bundle_name) is None:
        raise HTTPException(status_code=404, detail=f"Bundle {bundle_name} not found")

    return BundleLoadResponse(bundle=bundle_name, loaded=orch.load_bundle(bundle_name))


@router.get("/plugins/{plugin_name}/bundle", response_model=BundleLookupResponse)
async def get_plugin_bundle(
    plugin_name: str, orch: ConfigOrchestrator = Depends(get_orchestrator)
):
    """Return the bundle containing a plugin, if any."""
    bundle, items = orch.get_bundle(plugin_name)
    return BundleLookupResponse(plugin=plugin_name, bundle=bundle, items=items)


def initialize_api(settings: Settings, configure_now: bool = True) -> ConfigOrchestrator:
    """Build the orchestrator from settings and register it for the routes.

    Args:
        settings: Application settings (configuration file, search paths).
        configure_now: Run a configuration pass immediately.

    Returns:
        The registered orchestrator.
    """
    orchestrator = ConfigOrchestrator.from_settings(settings)
    service_container.initialize(orchestrator)
    if configure_now:
        orchestrator.setup()
        service_container.logger.info(
            f"Configured plugins: {sorted(orchestrator.state.configured)}"
        )
    return orchestrator
