from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.datetime_utils import parse_iso_date
from ..common.http import json_endpoint
from ..core.exceptions import ValidationError
from ..container import Container
from .model import Funeral


def _funeral_json(f: Funeral) -> dict:
    return {
        "funeral_id": f.funeral_id,
        "date": f.funeral_date.isoformat(),
        "member_id": f.member_id,
        "deceased_id": f.deceased_id,
        "cemeteryAssignments": list(f.cemetery_assignments),
        "funeralAssignments": list(f.funeral_assignments),
        "removedMembers": list(f.removed_members),
        "eventAbsents": list(f.event_absents),
        "funeralWorkAbsents": list(f.funeral_work_absents),
        "cemeteryWorkAbsents": list(f.cemetery_work_absents),
        "extraDueMembers": list(f.extra_due_members),
    }


def register(app: Flask, container: Container) -> None:
    service = container.funeral_service

    def _body() -> dict:
        data = request.get_json(silent=True)
        if not isinstance(data, dict):
            raise ValidationError("Request body must be a JSON object")
        return data

    @app.route("/funeral/createFuneral", methods=["POST"], endpoint="create_funeral")
    @json_endpoint
    def create_funeral():
        data = _body()
        funeral = service.create_funeral(
            funeral_date=parse_iso_date(data.get("date") or ""),
            member_id=data.get("member_id"),
            deceased_id=data.get("deceased_id"),
            cemetery_assignments=data.get("cemeteryAssignments"),
            funeral_assignments=data.get("funeralAssignments"),
            removed_members=data.get("removedMembers"),
        )
        return jsonify({"message": "Funeral created successfully", "funeral": _funeral_json(funeral)}), 201

    @app.route("/funeral/<funeral_id>/assignments", methods=["PUT"], endpoint="update_funeral_assignments")
    @json_endpoint
    def update_assignments(funeral_id):
        data = _body()
        funeral = service.update_assignments(
            funeral_id,
            cemetery_assignments=data.get("cemeteryAssignments"),
            funeral_assignments=data.get("funeralAssignments"),
            removed_members=data.get("removedMembers"),
            funeral_date=parse_iso_date(data["date"]) if data.get("date") else None,
        )
        return jsonify({"message": "Funeral assignments updated", "funeral": _funeral_json(funeral)})

    @app.route("/funeral/lastAssignmentInfo", methods=["GET"], endpoint="last_assignment_info")
    @json_endpoint
    def last_assignment_info():
        return jsonify(service.get_last_assignment_info())

    @app.route("/funeral/updateFuneralAbsents", methods=["POST"], endpoint="update_funeral_absents")
    @json_endpoint
    def update_funeral_absents():
        absent_data = _body().get("absentData") or {}
        result = service.update_event_absents(absent_data.get("funeral_id"), absent_data.get("absentArray"))
        return jsonify(
            {
                "message": "Funeral event absents updated successfully",
                "funeral": _funeral_json(result.funeral),
                "finesAdded": result.fines_added,
                "finesRemoved": result.fines_removed,
                "excludedFromFines": result.excluded_from_fines,
                "excludedDueToWorkFines": result.excluded_due_to_work_fines,
            }
        )

    @app.route("/funeral/updateWorkAttendance", methods=["POST"], endpoint="update_work_attendance")
    @json_endpoint
    def update_work_attendance():
        data = _body()
        result = service.update_work_attendance(
            data.get("funeralId"),
            funeral_work_absents=data.get("funeralWorkAbsents"),
            cemetery_work_absents=data.get("cemeteryWorkAbsents"),
        )
        return jsonify(
            {
                "message": "Work attendance updated successfully",
                "funeral": _funeral_json(result.funeral),
                "funeralFinesAdded": result.funeral_work.fines_added,
                "funeralFinesRemoved": result.funeral_work.fines_removed,
                "cemeteryFinesAdded": result.cemetery_work.fines_added,
                "cemeteryFinesRemoved": result.cemetery_work.fines_removed,
                "eventFinesRemoved": result.event_fines_removed,
            }
        )

    @app.route("/funeral/fines/<funeral_id>", methods=["GET"], endpoint="funeral_fines")
    @json_endpoint
    def funeral_fines(funeral_id):
        return jsonify(service.get_funeral_fines(funeral_id))

    @app.route("/funeral/workFineAmounts/<funeral_id>", methods=["GET"], endpoint="funeral_work_fine_amounts")
    @json_endpoint
    def work_fine_amounts(funeral_id):
        return jsonify(service.get_work_fine_amounts(funeral_id))

    @app.route("/funeral/extraDue", methods=["POST"], endpoint="add_extra_due")
    @json_endpoint
    def add_extra_due():
        data = _body()
        added = service.record_extra_due(
            deceased_id=data.get("deceased_id"),
            member_id=data.get("dueMemberId"),
            amount=data.get("amount"),
        )
        message = "Extra due recorded" if added else "Extra due already recorded for this member"
        return jsonify({"message": message, "added": added})

    @app.route("/funeral/extraDue", methods=["GET"], endpoint="list_extra_dues")
    @json_endpoint
    def list_extra_dues():
        return jsonify({"extraDues": service.get_extra_dues(request.args.get("deceased_id"))})

    @app.route("/funeral/byDeceased", methods=["DELETE"], endpoint="delete_funeral_by_deceased")
    @json_endpoint
    def delete_by_deceased():
        removed = service.delete_by_deceased_id(_body().get("deceased_id"))
        return jsonify({"message": "Funeral deleted successfully", "finesRemoved": removed})
