from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.datetime_utils import parse_iso_date
from ..common.http import json_endpoint
from ..core.exceptions import ValidationError
from ..container import Container


def register(app: Flask, container: Container) -> None:
    service = container.meeting_service

    @app.route("/meeting/absents", methods=["POST"], endpoint="save_meeting_absents")
    @json_endpoint
    def save_absents():
        data = request.get_json(silent=True) or {}
        absent_data = data.get("absentData")
        if not isinstance(absent_data, dict):
            raise ValidationError("absentData is required")

        result = service.save_attendance(
            meeting_date=parse_iso_date(absent_data.get("date") or ""),
            absent_array=absent_data.get("absentArray"),
        )
        return jsonify(
            {
                "message": result.message,
                "isUpdate": result.is_update,
                "meetingId": result.meeting_id,
                "finesAdded": result.fines_added,
                "finesRemoved": result.fines_removed,
                "affectedMembers": result.affected_members,
            }
        ), (200 if result.is_update else 201)

    @app.route("/meeting/attendance", methods=["GET"], endpoint="meeting_attendance_sheet")
    @json_endpoint
    def attendance_sheet():
        return jsonify(service.get_attendance_sheet())

    @app.route("/meeting/attendance/date", methods=["GET"], endpoint="meeting_by_date")
    @json_endpoint
    def meeting_by_date():
        meeting = service.get_meeting_by_date(parse_iso_date(request.args.get("date") or ""))
        if not meeting:
            return jsonify({"meeting": None})
        return jsonify(
            {
                "meeting": {
                    "meetingId": meeting.meeting_id,
                    "date": meeting.meeting_date.isoformat(),
                    "absents": list(meeting.absents),
                }
            }
        )

    @app.route("/meeting/fines/<int:meeting_id>", methods=["GET"], endpoint="meeting_fines")
    @json_endpoint
    def meeting_fines(meeting_id: int):
        return jsonify(service.get_meeting_fines(meeting_id))
