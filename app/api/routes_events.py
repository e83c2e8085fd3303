"""
Event API routes: lifecycle, registration, attendance and discovery
"""

from typing import Optional
from fastapi import APIRouter, Depends, File, Form, Query, Request, UploadFile
from fastapi.responses import Response
from pydantic import ValidationError
from sqlalchemy.orm import Session

from app.api.ws import websocket_manager
from app.core.constants import UserRole
from app.core.db import get_db
from app.schemas.event import (
    AttendanceQuestionIn,
    AttendeeResponse,
    EventCreate,
    EventOwnerView,
    EventPublic,
    EventStatusUpdate,
    MarkAttendanceRequest,
    QrAttendanceRequest,
    RegisterRequest,
)
from app.services.checkin_service import CheckInService
from app.services.errors import Forbidden, InvalidArgument
from app.services.event_service import EventService
from app.services.excel_service import ExcelService
from app.services.recommendation_service import RecommendationService
from app.services.upload_service import UploadService
from app.utils.responses import rate_limit_error, success_response
from app.utils.security import CurrentUser, get_client_ip, get_current_user, rate_limit_check, require_roles

router = APIRouter()

def get_event_service(db: Session = Depends(get_db)) -> EventService:
    return EventService(db)

def get_checkin_service(db: Session = Depends(get_db)) -> CheckInService:
    return CheckInService(db, websocket_manager)

def get_recommendation_service(db: Session = Depends(get_db)) -> RecommendationService:
    return RecommendationService(db)

@router.post("")
async def create_event(
    event_data: EventCreate,
    user: CurrentUser = Depends(get_current_user),
    service: EventService = Depends(get_event_service)
):
    """Club proposes a new event (starts as pending)"""
    event = service.create_event(user.id, user.role, event_data)
    return success_response(
        message="Event created successfully",
        data=EventOwnerView.from_event(event),
        status_code=201
    )

@router.post("/with-poster")
async def create_event_with_poster(
    title: str = Form(...),
    description: str = Form(""),
    category: str = Form("Other"),
    date: Optional[str] = Form(None),
    time: Optional[str] = Form(None),
    venue: Optional[str] = Form(None),
    poster: UploadFile = File(...),
    user: CurrentUser = Depends(get_current_user),
    service: EventService = Depends(get_event_service)
):
    """Club proposes a new event with a poster image"""
    try:
        event_data = EventCreate(
            title=title,
            description=description,
            category=category,
            date=date,
            time=time,
            venue=venue
        )
    except ValidationError as e:
        raise InvalidArgument("Invalid event data", details=e.errors(include_url=False, include_context=False))

    # Role check precedes touching the filesystem
    if user.role != UserRole.club.value:
        raise Forbidden("Only clubs can create events")

    poster_url = UploadService.save_poster(await poster.read(), poster.filename)
    event = service.create_event(user.id, user.role, event_data, poster_url=poster_url)
    return success_response(
        message="Event created successfully",
        data=EventOwnerView.from_event(event),
        status_code=201
    )

@router.get("")
async def list_events(
    status: Optional[str] = Query(None),
    service: EventService = Depends(get_event_service)
):
    """List events with their creator's name"""
    events = service.list_events(status=status)
    return success_response(
        message="Events retrieved successfully",
        data=[EventPublic.from_event(event) for event in events]
    )

@router.get("/search")
async def search_events(
    type: Optional[str] = Query(None, description="Event category"),
    keyword: Optional[str] = Query(None),
    service: EventService = Depends(get_event_service)
):
    """Search approved events by category and title keyword"""
    events = service.search(category=type, keyword=keyword)
    return success_response(
        message="Search results",
        data=[EventPublic.from_event(event) for event in events]
    )

@router.get("/recommended")
async def recommended_events(
    user: CurrentUser = Depends(get_current_user),
    service: RecommendationService = Depends(get_recommendation_service)
):
    """Approved events in categories the student has joined before"""
    events = service.recommend(user.id, user.role)
    return success_response(
        message="Recommended events",
        data=[EventPublic.from_event(event) for event in events]
    )

@router.get("/mine")
async def my_events(
    user: CurrentUser = Depends(get_current_user),
    service: EventService = Depends(get_event_service)
):
    """Events created by the calling club"""
    events = service.list_owned(user.id, user.role)
    return success_response(
        message="Events retrieved successfully",
        data=[EventOwnerView.from_event(event) for event in events]
    )

@router.get("/{event_id}")
async def get_event(
    event_id: int,
    service: EventService = Depends(get_event_service)
):
    """Public event details"""
    event = service.get_event(event_id)
    return success_response(
        message="Event retrieved successfully",
        data=EventPublic.from_event(event)
    )

@router.patch("/{event_id}/status")
async def update_event_status(
    event_id: int,
    status_update: EventStatusUpdate,
    user: CurrentUser = Depends(get_current_user),
    service: EventService = Depends(get_event_service)
):
    """Admin approves, rejects or resets an event"""
    event = service.set_status(event_id, user.role, status_update.status)
    return success_response(
        message=f"Event status set to {event.status}",
        data=EventOwnerView.from_event(event)
    )

@router.put("/{event_id}/attendance-question")
async def set_attendance_question(
    event_id: int,
    question: AttendanceQuestionIn,
    user: CurrentUser = Depends(get_current_user),
    service: EventService = Depends(get_event_service)
):
    """Configure the check-in challenge"""
    event = service.set_attendance_question(event_id, user.id, user.role, question)
    return success_response(
        message="Attendance question saved",
        data=EventOwnerView.from_event(event)
    )

@router.post("/{event_id}/register")
async def register_for_event(
    event_id: int,
    register_data: Optional[RegisterRequest] = None,
    user: CurrentUser = Depends(require_roles(UserRole.student)),
    service: EventService = Depends(get_event_service)
):
    """Student registers for an approved event"""
    college_name = register_data.college_name if register_data else None
    event = service.register(event_id, user.id, college_name)
    return success_response(
        message="Registered successfully",
        data=EventPublic.from_event(event)
    )

@router.post("/{qr_code_id}/qr-attendance")
async def submit_qr_attendance(
    qr_code_id: str,
    request: Request,
    attendance_data: QrAttendanceRequest,
    service: CheckInService = Depends(get_checkin_service)
):
    """Public check-in reached by scanning the event QR code"""
    # Rate limiting
    client_ip = get_client_ip(request)
    if not rate_limit_check(client_ip):
        rate_limit_error()

    record = await service.submit_qr_attendance(
        qr_code_id=qr_code_id,
        email=attendance_data.email,
        name=attendance_data.name,
        answer=attendance_data.answer
    )
    return success_response(
        message="Attendance marked successfully",
        data={
            "event_id": record.event_id,
            "name": record.user.name if record.user else None,
            "is_attended": record.is_attended,
            "attended_at": record.attended_at
        }
    )

@router.post("/{event_id}/attendance")
async def mark_attendance(
    event_id: int,
    attendance_data: MarkAttendanceRequest,
    user: CurrentUser = Depends(get_current_user),
    service: CheckInService = Depends(get_checkin_service)
):
    """Club or admin marks a registered student as present"""
    record, was_already_attended = await service.mark_attendance(
        event_id, user.id, user.role, attendance_data.student_id
    )
    message = "Attendance marked for student" if not was_already_attended else "Student was already marked present"
    return success_response(
        message=message,
        data={
            "attendee": AttendeeResponse.from_record(record),
            "was_already_attended": was_already_attended
        }
    )

@router.get("/{event_id}/attendees")
async def list_attendees(
    event_id: int,
    user: CurrentUser = Depends(get_current_user),
    service: EventService = Depends(get_event_service)
):
    """Attendee roster with resolved names"""
    event, records = service.get_attendees(event_id, user.id, user.role)
    return success_response(
        message="Attendees retrieved successfully",
        data={
            "event_id": event.id,
            "title": event.title,
            "attendees": [AttendeeResponse.from_record(record) for record in records]
        }
    )

@router.get("/{event_id}/attendance.xlsx")
async def export_attendance(
    event_id: int,
    user: CurrentUser = Depends(get_current_user),
    service: EventService = Depends(get_event_service)
):
    """Download the attendance roster as Excel"""
    event, records = service.get_attendees(event_id, user.id, user.role)
    excel_content = ExcelService.export_attendance(event, records)

    return Response(
        content=excel_content,
        media_type="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        headers={"Content-Disposition": f"attachment; filename=attendance_{event.id}.xlsx"}
    )
