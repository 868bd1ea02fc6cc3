from __future__ import annotations

import argparse
from datetime import datetime, timezone
import logging
import sys

from leasecast.core.config import get_settings
from leasecast.core.errors import DataUnavailable
from leasecast.db.session import SessionLocal, engine
from leasecast.schemas.forecast import ForecastReportOut
from leasecast.services.data_sources import build_forecast_report


logger = logging.getLogger("leasecast.cli")


def _parse_now(value: str | None) -> datetime:
    if not value:
        return datetime.now(timezone.utc)
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def main(argv: list[str] | None = None) -> int:
    settings = get_settings()
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
    parser = argparse.ArgumentParser(prog=settings.app_name, description="Revenue forecast and vacancy risk report.")
    parser.add_argument("--now", help="Report time as ISO-8601 (defaults to the current UTC time).")
    args = parser.parse_args(argv)

    now = _parse_now(args.now)
    try:
        with SessionLocal() as db:
            report = build_forecast_report(db, now=now, settings=settings)
    except DataUnavailable:
        logger.error("Forecast report not generated: data source unavailable.")
        return 1
    finally:
        engine.dispose()

    print(ForecastReportOut.from_report(report).model_dump_json(indent=2))
    return 0


if __name__ == "__main__":
    sys.exit(main())
