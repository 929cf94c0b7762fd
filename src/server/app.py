from __future__ import annotations

import asyncio
import contextlib
import json
import logging
from collections import deque
from typing import Deque, Optional, Set

from fastapi import FastAPI, HTTPException, WebSocket, WebSocketDisconnect
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field

from simulation import ConfigurationError, SimulationEvent, Simulator

logger = logging.getLogger(__name__)


class ConfigureRequest(BaseModel):
    floors: int = Field(10, ge=1)
    elevators: int = Field(3, ge=1)
    request_probability: float = Field(0.5, ge=0.0, le=1.0)
    request_interval: int = Field(1, ge=0)
    service_budget: int = Field(100, ge=1)
    dispatcher: str = "ranked"
    insert_policy: str = "resort"
    random_seed: Optional[int] = None


class PassengerCall(BaseModel):
    origin: int = Field(..., ge=0)
    destination: int = Field(..., ge=0)


class ServiceRequest(BaseModel):
    trips: Optional[int] = Field(None, ge=1)


class SimulationManager:
    """Paces a simulator on the event loop and fans its events out to clients."""

    def __init__(
        self,
        num_floors: int = 10,
        elevator_count: int = 3,
        tick_interval: float = 0.25,
        event_backlog: int = 500,
    ) -> None:
        self.tick_interval = tick_interval
        self.clients: Set[WebSocket] = set()
        # Oldest events fall off when nobody polls between ticks.
        self._pending: Deque[SimulationEvent] = deque(maxlen=event_backlog)
        self._task: Optional[asyncio.Task] = None
        self._lock = asyncio.Lock()
        self.simulator = self._attach(Simulator.configure(num_floors, elevator_count))

    def _attach(self, simulator: Simulator) -> Simulator:
        simulator.on_event("*", self._pending.append)
        return simulator

    async def start(self) -> None:
        if self._task is None:
            self._task = asyncio.create_task(self._run())

    async def stop(self) -> None:
        self.simulator.stop()
        if self._task:
            self._task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._task
            self._task = None

    async def _run(self) -> None:
        while True:
            async with self._lock:
                if self.simulator.is_settled():
                    logger.info("Simulation settled at t=%d", self.simulator.current_time)
                    payload = self.current_state()
                    await self.broadcast(payload)
                    break
                self.simulator.step()
                payload = self.current_state()
            await self.broadcast(payload)
            await asyncio.sleep(self.tick_interval)
        self._task = None

    async def broadcast(self, payload: dict) -> None:
        message = json.dumps(payload)
        disconnected: Set[WebSocket] = set()
        for client in set(self.clients):
            try:
                await client.send_text(message)
            except WebSocketDisconnect:
                disconnected.add(client)
        for client in disconnected:
            await self.unregister(client)

    async def register(self, websocket: WebSocket) -> None:
        await websocket.accept()
        self.clients.add(websocket)
        await websocket.send_text(json.dumps(self.simulator.snapshot()))

    async def unregister(self, websocket: WebSocket) -> None:
        if websocket in self.clients:
            self.clients.remove(websocket)
        with contextlib.suppress(Exception):
            await websocket.close()

    def current_state(self) -> dict:
        state = self.simulator.snapshot()
        state["events"] = [event.as_dict() for event in self._pending]
        self._pending.clear()
        return state

    async def configure(self, request: ConfigureRequest) -> dict:
        simulator = Simulator.configure(
            request.floors,
            request.elevators,
            request_probability=request.request_probability,
            request_interval=request.request_interval,
            service_budget=request.service_budget,
            dispatcher=request.dispatcher,
            insert_policy=request.insert_policy,
            random_seed=request.random_seed,
        )
        await self.stop()
        async with self._lock:
            self._pending.clear()
            self.simulator = self._attach(simulator)
        await self.start()
        return self.simulator.snapshot()

    async def submit(self, origin: int, destination: int) -> dict:
        async with self._lock:
            elevator = self.simulator.submit_request(origin, destination)
            state = self.simulator.snapshot()
            state["assigned"] = None if elevator is None else elevator.elevator_id
            return state

    async def halt(self) -> dict:
        await self.stop()
        return self.simulator.snapshot()

    async def service(self, elevator_id: int, trips: Optional[int]) -> Optional[dict]:
        async with self._lock:
            if self.simulator.service_elevator(elevator_id, trips) is None:
                return None
            state = self.simulator.snapshot()
        if not self.simulator.stopped:
            await self.start()
        return state


manager = SimulationManager()
app = FastAPI(title="Elevator Bank Simulation API")
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.on_event("startup")
async def on_startup() -> None:
    await manager.start()


@app.on_event("shutdown")
async def on_shutdown() -> None:
    await manager.stop()


@app.get("/state")
async def get_state() -> dict:
    return manager.simulator.snapshot()


@app.post("/configure")
async def configure(request: ConfigureRequest) -> dict:
    try:
        return await manager.configure(request)
    except ConfigurationError as exc:
        raise HTTPException(status_code=400, detail=str(exc))


@app.post("/requests")
async def submit_request(call: PassengerCall) -> dict:
    try:
        return await manager.submit(call.origin, call.destination)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc))


@app.post("/stop")
async def stop_simulation() -> dict:
    return await manager.halt()


@app.post("/elevators/{elevator_id}/service")
async def service_elevator(elevator_id: int, request: ServiceRequest) -> dict:
    state = await manager.service(elevator_id, request.trips)
    if state is None:
        raise HTTPException(status_code=404, detail=f"Unknown elevator {elevator_id}")
    return state


@app.websocket("/ws/stream")
async def websocket_endpoint(websocket: WebSocket) -> None:
    await manager.register(websocket)
    try:
        while True:
            await websocket.receive_text()
    except WebSocketDisconnect:
        await manager.unregister(websocket)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("server.app:app", host="0.0.0.0", port=8000, reload=False)
