"""Run one recruiter scoring pass: ``python -m recruiter_scoring``."""

from __future__ import annotations

import asyncio
import json
import logging

from recruiter_scoring.config import get_settings
from recruiter_scoring.pipeline.runner import RecruitersScoring


def main() -> None:
    settings = get_settings()
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
    )
    summary = asyncio.run(RecruitersScoring(settings=settings).run())
    print(json.dumps(summary.to_dict(), indent=2))


if __name__ == "__main__":
    main()
