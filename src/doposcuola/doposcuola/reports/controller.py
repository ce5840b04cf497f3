from __future__ import annotations

import csv
import io
from datetime import date

from flask import Flask, request

from ..common.datetime_utils import parse_month
from ..common.web import capability_required, current_user, json_view, ok
from ..core.enums import Capability
from .service import REPORT_FIELDS


def register(app: Flask, container) -> None:
    def _build_report():
        year, mon = parse_month(request.args.get("month") or date.today().strftime("%Y-%m"))
        month = f"{year:04d}-{mon:02d}"
        data = container.booking_report_service.build_booking_report(
            actor=current_user(),
            month=month,
            teacher_id=request.args.get("teacher_id") or None,
            subject_id=request.args.get("subject_id") or None,
            absences_only=request.args.get("absences") == "1",
            lang=request.args.get("lang") or "en",
        )
        return month, data

    def _write_report_csv(*, data, filename: str):
        out = io.StringIO()
        writer = csv.DictWriter(out, fieldnames=REPORT_FIELDS)
        writer.writeheader()
        for row in data.rows:
            writer.writerow(row)

        csv_bytes = out.getvalue().encode("utf-8-sig")
        return app.response_class(
            csv_bytes,
            mimetype="text/csv",
            headers={"Content-Disposition": f"attachment; filename={filename}"},
        )

    @app.route("/api/admin/reports/bookings", methods=["GET"], endpoint="booking_report")
    @json_view
    @capability_required(Capability.VIEW_REPORTS)
    def booking_report():
        month, data = _build_report()
        return ok({"month": month, "rows": data.rows, "summary": data.summary})

    @app.route("/api/admin/reports/bookings.csv", methods=["GET"], endpoint="booking_report_csv")
    @json_view
    @capability_required(Capability.VIEW_REPORTS)
    def booking_report_csv():
        month, data = _build_report()
        return _write_report_csv(data=data, filename=f"bookings_{month.replace('-', '')}.csv")
