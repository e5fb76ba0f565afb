#!/usr/bin/env python3
"""Score a resume from the terminal.

    python run_client.py --resume resume.pdf --jd job.txt
    python run_client.py --resume resume.pdf --jd "Senior Python developer..."
    python run_client.py --logout

Prompts for email/password when no session is stored for the API origin.
"""
from __future__ import annotations

import argparse
import getpass
import os
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parent
sys.path.insert(0, str(ROOT))

from score_client import (
    ApiClient,
    AuthGateway,
    ProtectedRouteGuard,
    SubmissionWorkflow,
    load_settings,
    open_session_store,
)
from score_client.guard import DASHBOARD_ROUTE
from score_client.log import configure_logging, get_logger
from score_client.models import ResumeFile

log = get_logger(__name__)


def _read_jd(value: str) -> str:
    # inline text can exceed the filename limit; isfile() reports False for it
    path = os.path.expanduser(value)
    if os.path.isfile(path):
        return Path(path).read_text(encoding="utf-8")
    return value


def _login(gateway: AuthGateway) -> bool:
    print("  No stored session — please sign in.")
    email = input("  Email: ").strip()
    password = getpass.getpass("  Password: ")
    result = gateway.login(email, password)
    if not result.ok:
        print(f"  ✗ {result.message or 'Login failed'}")
        return False
    print(f"  ✓ Signed in as {result.value.user.name or result.value.user.email}")
    return True


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Score a resume against a job description.")
    parser.add_argument("--resume", help="Path to the resume PDF")
    parser.add_argument("--jd", help="Job description text, or a path to a text file")
    parser.add_argument("--logout", action="store_true", help="Clear the stored session and exit")
    args = parser.parse_args(argv)

    settings = load_settings()
    configure_logging(settings)
    store = open_session_store(settings)
    api = ApiClient(settings)

    if args.logout:
        store.clear()
        print("  Signed out.")
        return 0

    if not args.resume or not args.jd:
        parser.error("--resume and --jd are required")

    resume_path = Path(args.resume).expanduser()
    if not resume_path.is_file():
        print(f"  ✗ File not found: {resume_path}")
        return 1

    guard = ProtectedRouteGuard(store)
    if guard.resolve(DASHBOARD_ROUTE).redirect and not _login(AuthGateway(api, store)):
        return 1

    wf = SubmissionWorkflow(api, store)
    wf.select_resume(ResumeFile.from_path(resume_path))
    wf.edit_job_description(_read_jd(args.jd))

    result = wf.submit()
    if not result.ok:
        print(f"  ✗ Failed to score resume: {result.message}")
        return 1

    score = result.value
    print()
    print(f"  Score: {score.value}/100")
    if score.suggestions:
        print("\n  Suggestions:")
        for idx, suggestion in enumerate(score.suggestions, start=1):
            print(f"    {idx}. {suggestion}")
    if score.support:
        print("\n  Resources:")
        for link in score.support:
            print(f"    - {link}")
    print()
    return 0


if __name__ == "__main__":
    sys.exit(main())
