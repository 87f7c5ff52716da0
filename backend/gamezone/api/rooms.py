"""
Room management API
"""
from dataclasses import asdict
from fastapi import APIRouter, Depends
from typing import List, Optional

from gamezone.api.deps import get_gateway
from gamezone.gateway import SqlAlchemyGateway
from gamezone.schemas.room import (
    RoomCreate, RoomUpdate, RoomResponse, StartSessionRequest, StopSessionRequest,
    AdjustTimeRequest, LiveCostResponse, ExpiredRoomResponse,
)
from gamezone.schemas.order import SessionResponse
from gamezone.services.catalog import RoomCatalog
from gamezone.services.session_engine import SessionEngine

router = APIRouter(prefix="/api/rooms", tags=["Rooms"])


@router.get("", response_model=List[RoomResponse])
def get_rooms(status: Optional[str] = None, gateway: SqlAlchemyGateway = Depends(get_gateway)):
    """List rooms"""
    return RoomCatalog(gateway).list(status)


@router.get("/expired", response_model=ExpiredRoomResponse)
def get_expired_rooms(gateway: SqlAlchemyGateway = Depends(get_gateway)):
    """Occupied rooms whose booked time is over"""
    rooms = SessionEngine(gateway).expired_sessions()
    return {"rooms": rooms, "count": len(rooms)}


@router.get("/{room_id}", response_model=RoomResponse)
def get_room(room_id: int, gateway: SqlAlchemyGateway = Depends(get_gateway)):
    """Room detail"""
    return RoomCatalog(gateway).get(room_id)


@router.post("", response_model=RoomResponse)
def create_room(room: RoomCreate, gateway: SqlAlchemyGateway = Depends(get_gateway)):
    """Create a room"""
    return RoomCatalog(gateway).create(**room.model_dump())


@router.put("/{room_id}", response_model=RoomResponse)
def update_room(room_id: int, request: RoomUpdate, gateway: SqlAlchemyGateway = Depends(get_gateway)):
    """Update a room (name, console, prices, or cleaning/maintenance status)"""
    return RoomCatalog(gateway).update(room_id, request.model_dump(exclude_unset=True))


@router.delete("/{room_id}")
def delete_room(room_id: int, gateway: SqlAlchemyGateway = Depends(get_gateway)):
    """Delete a room with no orders or appointments"""
    RoomCatalog(gateway).delete(room_id)
    return {"message": "Room deleted"}


@router.post("/{room_id}/start-session", response_model=SessionResponse)
def start_session(room_id: int, request: StartSessionRequest, gateway: SqlAlchemyGateway = Depends(get_gateway)):
    """Start a fixed or open-time session"""
    result = SessionEngine(gateway).start_session(
        room_id, request.customer_name, request.mode, request.duration_hours, request.order_id
    )
    return asdict(result)


@router.post("/{room_id}/stop-session", response_model=SessionResponse)
def stop_session(room_id: int, request: StopSessionRequest, gateway: SqlAlchemyGateway = Depends(get_gateway)):
    """Stop the running session (pauses fixed sessions unless force_complete)"""
    result = SessionEngine(gateway).stop_session(room_id, request.force_complete, request.payment_method)
    return asdict(result)


@router.post("/{room_id}/adjust-time", response_model=SessionResponse)
def adjust_time(room_id: int, request: AdjustTimeRequest, gateway: SqlAlchemyGateway = Depends(get_gateway)):
    """Add or remove time from the running fixed session"""
    return asdict(SessionEngine(gateway).adjust_time(room_id, request.delta_hours))


@router.get("/{room_id}/live-cost", response_model=LiveCostResponse)
def get_live_cost(room_id: int, gateway: SqlAlchemyGateway = Depends(get_gateway)):
    """Cost accrued so far by the running session"""
    return asdict(SessionEngine(gateway).live_cost(room_id))
