from __future__ import annotations

import csv
import io

from flask import Flask, request

from ..common.http import current_user_id, json_body, login_required, ok, to_json
from ..container import Container

_CSV_FIELDS = [
    "date",
    "user_id",
    "full_name",
    "email",
    "role",
    "status",
    "overtime",
    "clock_in",
    "clock_out",
    "work_hours",
    "source",
]


def _row_json(row) -> dict:
    data = to_json(row)
    data["attended"] = row.attended
    return data


def _csv_row(row) -> dict:
    return {
        "date": row.local_date.isoformat(),
        "user_id": row.user_id,
        "full_name": row.full_name or "",
        "email": row.email,
        "role": row.role.value,
        "status": row.status.value,
        "overtime": "yes" if row.overtime else "no",
        "clock_in": row.clock_in_at.strftime("%H:%M:%S") if row.clock_in_at else "",
        "clock_out": row.clock_out_at.strftime("%H:%M:%S") if row.clock_out_at else "",
        "work_hours": row.work_hours or "",
        "source": row.source.value if row.source else "",
    }


def register(app: Flask, container: Container) -> None:
    @app.route("/api/orgs/<int:org_id>/attendance/clock-in", methods=["POST"], endpoint="attendance_clock_in")
    @login_required
    def attendance_clock_in(org_id: int):
        checkin = container.attendance_service.clock_in(org_id, user_id=current_user_id())
        return ok(checkin, message="Clocked in", code=201)

    @app.route("/api/orgs/<int:org_id>/attendance/clock-out", methods=["POST"], endpoint="attendance_clock_out")
    @login_required
    def attendance_clock_out(org_id: int):
        checkin = container.attendance_service.clock_out(org_id, user_id=current_user_id())
        return ok(checkin, message="Clocked out")

    @app.route("/api/orgs/<int:org_id>/attendance/qr", methods=["POST"], endpoint="attendance_qr")
    @login_required
    def attendance_qr(org_id: int):
        checkin, action = container.attendance_service.qr_toggle(
            org_id, user_id=current_user_id(), token=json_body().get("token", "")
        )
        message = "Clocked in" if action == "clock_in" else "Clocked out"
        return ok({"action": action, "checkin": to_json(checkin)}, message=message)

    @app.route("/api/orgs/<int:org_id>/attendance/today", methods=["GET"], endpoint="attendance_today")
    @login_required
    def attendance_today(org_id: int):
        checkin, decision = container.attendance_service.today(org_id, user_id=current_user_id())
        return ok(
            {
                "checkin": to_json(checkin),
                "clocked_in": checkin is not None and checkin.is_open,
                "status": decision.status.value if checkin else None,
                "overtime": decision.overtime,
            }
        )

    @app.route("/api/orgs/<int:org_id>/attendance/online", methods=["GET"], endpoint="attendance_online")
    @login_required
    def attendance_online(org_id: int):
        return ok(container.attendance_service.who_is_clocked_in(org_id, user_id=current_user_id()))

    @app.route("/api/orgs/<int:org_id>/attendance/history", methods=["GET"], endpoint="attendance_history")
    @login_required
    def attendance_history(org_id: int):
        result = container.attendance_history_service.history(
            org_id,
            user_id=current_user_id(),
            filter_name=request.args.get("filter", "all"),
            page=request.args.get("page", 1),
        )
        return ok(
            {
                "groups": [
                    {
                        "date": g.local_date.isoformat(),
                        "stats": g.stats,
                        "records": [_row_json(r) for r in g.rows],
                    }
                    for g in result.groups
                ],
                "page": result.page,
                "page_size": result.page_size,
                "total_rows": result.total_rows,
                "total_pages": result.total_pages,
            }
        )

    @app.route("/api/orgs/<int:org_id>/attendance/history.csv", methods=["GET"], endpoint="attendance_history_csv")
    @login_required
    def attendance_history_csv(org_id: int):
        rows = container.attendance_history_service.export_rows(
            org_id, user_id=current_user_id(), filter_name=request.args.get("filter", "all")
        )

        out = io.StringIO()
        writer = csv.DictWriter(out, fieldnames=_CSV_FIELDS)
        writer.writeheader()
        for row in rows:
            writer.writerow(_csv_row(row))

        return app.response_class(
            out.getvalue().encode("utf-8-sig"),
            mimetype="text/csv",
            headers={"Content-Disposition": f"attachment; filename=attendance_org{org_id}.csv"},
        )
