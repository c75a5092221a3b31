from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.datetime_utils import parse_iso_date
from ..common.http import json_endpoint
from ..core.exceptions import ValidationError
from ..container import Container
from .model import CommonWork


def _work_json(w: CommonWork) -> dict:
    return {
        "workId": w.work_id,
        "date": w.work_date.isoformat(),
        "title": w.title,
        "remarks": w.remarks,
        "absents": list(w.absents),
        "totalExpectedMembers": w.total_expected,
        "totalPresentMembers": w.total_present,
        "totalFineAmount": w.total_fine_amount,
        "attendanceRate": w.attendance_rate,
    }


def register(app: Flask, container: Container) -> None:
    service = container.common_work_service

    @app.route("/commonwork/attendance", methods=["POST"], endpoint="save_common_work_attendance")
    @json_endpoint
    def save_attendance():
        data = request.get_json(silent=True) or {}
        work_data = data.get("workData")
        if not isinstance(work_data, dict):
            raise ValidationError("workData is required")
        if not work_data.get("date") or not work_data.get("title"):
            raise ValidationError("Date and title are required")

        result = service.save_attendance(
            work_date=parse_iso_date(work_data["date"]),
            title=work_data["title"],
            remarks=work_data.get("remarks"),
            absent_array=work_data.get("absentArray"),
        )
        return jsonify(
            {
                "message": result.message,
                "isUpdate": result.is_update,
                "workId": result.work_id,
                "finesAdded": result.fines_added,
                "finesRemoved": result.fines_removed,
                "stats": result.stats.to_dict(),
            }
        )

    @app.route("/commonwork/date", methods=["GET"], endpoint="common_work_by_date")
    @json_endpoint
    def by_date():
        date_param = request.args.get("date")
        if not date_param:
            raise ValidationError("Date parameter is required")
        work = service.get_by_date(parse_iso_date(date_param))
        if not work:
            return jsonify({"message": "No common work found for this date", "commonWork": None})
        return jsonify({"message": "Common work fetched successfully", "commonWork": _work_json(work)})

    @app.route("/commonwork/stats", methods=["GET"], endpoint="common_work_stats")
    @json_endpoint
    def stats():
        return jsonify({"stats": service.get_yearly_stats(request.args.get("year"))})

    @app.route("/commonwork/fineAmount/<work_id>", methods=["GET"], endpoint="common_work_fine_amount")
    @json_endpoint
    def fine_amount(work_id):
        amount = service.get_fine_amount(work_id)
        return jsonify({"workId": int(work_id), "commonWorkFine": amount})

    @app.route("/commonwork/<work_id>", methods=["GET"], endpoint="common_work_by_id")
    @json_endpoint
    def by_id(work_id):
        return jsonify({"commonWork": _work_json(service.get_by_id(work_id))})

    @app.route("/commonwork/<work_id>", methods=["DELETE"], endpoint="delete_common_work")
    @json_endpoint
    def delete(work_id):
        removed = service.delete(work_id)
        return jsonify({"message": "Common work deleted successfully", "finesRemoved": removed})
