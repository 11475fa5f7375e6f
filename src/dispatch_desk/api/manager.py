"""
Dispatch Desk API - Zone, Call and Staff Management

Provides REST API for:
- Zone management (create, guard, battery, custom status, contract)
- Bulk guard / dispatch over a zone selection
- Call queue (raise, assign, complete, reset)
- Staff roster and custom statuses
- Dashboard statistics
- Simulation control

Usage:
    uvicorn dispatch_desk.api.manager:app --host 0.0.0.0 --port 8080
"""

import logging
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from .. import __version__
from ..config import DeskConfig
from ..domain import (
    BatteryAction,
    CallStatus,
    CallType,
    ContractStatus,
    DeskError,
    EmployeeStatus,
    InvalidTransition,
    NotFound,
    ValidationError,
)
from ..services.desk import DispatchDesk, ZoneView
from ..services.simulation import SimulationTimers


logger = logging.getLogger(__name__)


# =============================================================================
# Pydantic Models
# =============================================================================

class ZoneCreate(BaseModel):
    address: str
    phone: str


class GuardUpdate(BaseModel):
    guarded: bool


class BatteryUpdate(BaseModel):
    level: Optional[int] = None
    action: Optional[BatteryAction] = None  # charge / discharge, instead of level


class CustomStatusAssign(BaseModel):
    status_id: Optional[str] = None  # None clears the status


class ContractUpdate(BaseModel):
    status: ContractStatus


class BulkGuard(BaseModel):
    zone_ids: list[int] = Field(default_factory=list)
    guarded: bool = True


class BulkCalls(BaseModel):
    zone_ids: list[int] = Field(default_factory=list)
    type: CallType = CallType.ALARM


class CallCreate(BaseModel):
    zone_id: int
    type: CallType = CallType.EMERGENCY


class AssignRequest(BaseModel):
    employee_id: str


class EmployeeCreate(BaseModel):
    name: str
    rank: str


class CustomStatusCreate(BaseModel):
    name: str
    color: Optional[str] = None


# =============================================================================
# Serialization
# =============================================================================

ERROR_STATUS_CODES = {
    ValidationError: 400,
    NotFound: 404,
    InvalidTransition: 409,
}


def zone_payload(view: ZoneView, include_history: bool = False) -> dict:
    zone = view.zone
    data = zone.model_dump(mode="json", exclude={"history"})
    data["status"] = {
        **view.status.model_dump(mode="json"),
        "background": view.status.background,
    }
    data["has_pending_call"] = view.has_pending_call
    data["history_count"] = len(zone.history)
    if include_history:
        data["history"] = [h.model_dump(mode="json") for h in zone.history]
    return data


# =============================================================================
# FastAPI Application
# =============================================================================

def create_app(
    desk: Optional[DispatchDesk] = None,
    start_simulation: Optional[bool] = None,
) -> FastAPI:
    """Build the API around a desk.

    Args:
        desk: Desk to serve; a seeded desk from env config by default
        start_simulation: Start the timers on startup; defaults to
            config.simulation_enabled
    """
    if desk is None:
        desk = DispatchDesk.seeded(DeskConfig.from_env())
    if start_simulation is None:
        start_simulation = desk.config.simulation_enabled
    simulation = SimulationTimers(desk)

    app = FastAPI(
        title="Dispatch Desk",
        description="Zone, Call and Staff Management for the security dispatch desk",
        version=__version__,
    )
    app.state.desk = desk
    app.state.simulation = simulation

    @app.exception_handler(DeskError)
    async def desk_error_handler(request: Request, exc: DeskError):
        status_code = ERROR_STATUS_CODES.get(type(exc), 400)
        return JSONResponse(status_code=status_code, content={"detail": exc.message})

    # =========================================================================
    # Startup / Shutdown
    # =========================================================================

    @app.on_event("startup")
    async def startup_event():
        if start_simulation:
            logger.info("[STARTUP] starting simulation timers")
            simulation.start()
        else:
            logger.info("[STARTUP] simulation disabled")

    @app.on_event("shutdown")
    async def shutdown_event():
        simulation.stop()

    # =========================================================================
    # Zone Endpoints
    # =========================================================================

    @app.get("/api/zones")
    async def list_zones(order: str = "id"):
        """List zones; ``order=priority`` gives the operator queue order."""
        views = desk.list_zone_views(priority=(order == "priority"))
        return {"zones": [zone_payload(v) for v in views]}

    @app.post("/api/zones")
    async def create_zone(body: ZoneCreate):
        with desk.lock:
            zone = desk.create_zone(body.address, body.phone)
            view = desk.get_zone_view(zone.id)
        return {"status": "created", "zone": zone_payload(view)}

    @app.get("/api/zones/selection/guarded")
    async def select_guarded_zones():
        """Ids of every guarded zone (the "select all guarded" selection)."""
        return {"zone_ids": desk.guarded_zone_ids()}

    @app.post("/api/zones/bulk/guard")
    async def bulk_guard(body: BulkGuard):
        return desk.bulk_set_guard(body.zone_ids, body.guarded).to_dict()

    @app.post("/api/zones/bulk/calls")
    async def bulk_calls(body: BulkCalls):
        return desk.bulk_raise_call(body.zone_ids, body.type).to_dict()

    @app.get("/api/zones/{zone_id}")
    async def get_zone(zone_id: int):
        return zone_payload(desk.get_zone_view(zone_id), include_history=True)

    @app.get("/api/zones/{zone_id}/history")
    async def get_zone_history(zone_id: int, limit: Optional[int] = None):
        entries = desk.list_history(zone_id, limit)
        return {"zone_id": zone_id, "history": [h.model_dump(mode="json") for h in entries]}

    @app.post("/api/zones/{zone_id}/guard")
    async def set_guard(zone_id: int, body: GuardUpdate):
        with desk.lock:
            desk.set_guard(zone_id, body.guarded)
            view = desk.get_zone_view(zone_id)
        return zone_payload(view)

    @app.post("/api/zones/{zone_id}/battery")
    async def set_battery(zone_id: int, body: BatteryUpdate):
        if body.action is None and body.level is None:
            raise ValidationError("either level or action is required")
        with desk.lock:
            if body.action == BatteryAction.CHARGE:
                desk.charge_battery(zone_id)
            elif body.action == BatteryAction.DISCHARGE:
                desk.discharge_battery(zone_id)
            else:
                desk.set_battery(zone_id, body.level)
            view = desk.get_zone_view(zone_id)
        return zone_payload(view)

    @app.post("/api/zones/{zone_id}/custom-status")
    async def set_custom_status(zone_id: int, body: CustomStatusAssign):
        with desk.lock:
            desk.set_custom_status(zone_id, body.status_id)
            view = desk.get_zone_view(zone_id)
        return zone_payload(view)

    @app.post("/api/zones/{zone_id}/contract")
    async def set_contract(zone_id: int, body: ContractUpdate):
        with desk.lock:
            desk.set_contract_status(zone_id, body.status)
            view = desk.get_zone_view(zone_id)
        return zone_payload(view)

    # =========================================================================
    # Call Endpoints
    # =========================================================================

    @app.get("/api/calls")
    async def list_calls(status: Optional[CallStatus] = None):
        return {"calls": [c.model_dump(mode="json") for c in desk.list_calls(status)]}

    @app.get("/api/calls/resolved")
    async def list_resolved_calls():
        return {"calls": [c.model_dump(mode="json") for c in desk.list_resolved_calls()]}

    @app.post("/api/calls")
    async def raise_call(body: CallCreate):
        call = desk.raise_call(body.zone_id, body.type)
        return {"status": "created", "call": call.model_dump(mode="json")}

    @app.get("/api/calls/{call_id}")
    async def get_call(call_id: str):
        return desk.get_call(call_id).model_dump(mode="json")

    @app.post("/api/calls/{call_id}/assign")
    async def assign_call(call_id: str, body: AssignRequest):
        return desk.assign_employee(call_id, body.employee_id).model_dump(mode="json")

    @app.post("/api/calls/{call_id}/complete")
    async def complete_call(call_id: str):
        return desk.complete_call(call_id).model_dump(mode="json")

    @app.post("/api/calls/{call_id}/reset")
    async def reset_call(call_id: str):
        return desk.reset_call(call_id).model_dump(mode="json")

    # =========================================================================
    # Staff Endpoints
    # =========================================================================

    @app.get("/api/employees")
    async def list_employees(status: Optional[EmployeeStatus] = None):
        return {"employees": [e.model_dump(mode="json") for e in desk.list_employees(status)]}

    @app.post("/api/employees")
    async def create_employee(body: EmployeeCreate):
        employee = desk.create_employee(body.name, body.rank)
        return {"status": "created", "employee": employee.model_dump(mode="json")}

    @app.delete("/api/employees/{employee_id}")
    async def remove_employee(employee_id: str):
        desk.remove_employee(employee_id)
        return {"status": "deleted", "employee_id": employee_id}

    @app.get("/api/ranks")
    async def list_ranks():
        return {"ranks": list(desk.config.ranks)}

    # =========================================================================
    # Custom Status Endpoints
    # =========================================================================

    @app.get("/api/custom-statuses")
    async def list_custom_statuses():
        return {
            "custom_statuses": [
                {**s.model_dump(mode="json"), "background": s.background}
                for s in desk.list_custom_statuses()
            ]
        }

    @app.post("/api/custom-statuses")
    async def create_custom_status(body: CustomStatusCreate):
        status = desk.create_custom_status(body.name, body.color)
        return {
            "status": "created",
            "custom_status": {**status.model_dump(mode="json"), "background": status.background},
        }

    # =========================================================================
    # Stats
    # =========================================================================

    @app.get("/api/stats")
    async def get_stats():
        return desk.stats().to_dict()

    # =========================================================================
    # Simulation Endpoints
    # =========================================================================

    @app.get("/api/simulation")
    async def simulation_status():
        return simulation.get_status()

    @app.post("/api/simulation/start")
    async def simulation_start():
        simulation.start()
        return simulation.get_status()

    @app.post("/api/simulation/stop")
    async def simulation_stop():
        simulation.stop()
        return simulation.get_status()

    @app.post("/api/simulation/alarm")
    async def simulation_alarm():
        """Inject one random alarm now."""
        call = simulation.fire_alarm()
        return {"call": call.model_dump(mode="json") if call else None}

    @app.post("/api/simulation/drain")
    async def simulation_drain():
        """Apply one battery drain step now."""
        return {"drained": simulation.drain_once(), "step": desk.config.drain_step}

    return app


app = create_app()
