from __future__ import annotations

from datetime import datetime, time

from flask import Flask, jsonify, request

from ..common.datetime_utils import parse_iso_date
from ..common.http import json_endpoint
from ..container import Container


def register(app: Flask, container: Container) -> None:
    provider = container.settings_provider

    @app.route("/settings/fines", methods=["GET"], endpoint="fine_settings")
    @json_endpoint
    def fine_settings():
        return jsonify(provider.get_fine_settings().to_dict())

    @app.route("/settings/<setting_name>", methods=["PUT"], endpoint="update_setting")
    @json_endpoint
    def update_setting(setting_name: str):
        data = request.get_json(silent=True) or {}
        effective_from = None
        if data.get("effectiveFrom"):
            effective_from = datetime.combine(parse_iso_date(data["effectiveFrom"]), time.min)

        provider.update_setting(
            setting_name=setting_name,
            value=data.get("value"),
            effective_from=effective_from,
            description=str(data.get("description") or ""),
        )
        return jsonify({"message": "Setting updated successfully", "settingName": setting_name})
