"""
Resume submission workflow.

Collects a resume file and job-description text, posts them to the scoring
endpoint with the stored bearer token, and turns the response into a
ScoreResult or a single error message.

    Empty ─ resume ─> ResumeSelected ─ text ─> BothReady ─ submit ─> Submitting ─> Scored | Error
      └── text ──> TextEntered ── resume ──────┘

Entered fields survive errors so the user can retry without re-uploading;
only reset() clears them.
"""
from __future__ import annotations

import threading

from score_client.api import SCORE_PATH, ApiClient, http_error, json_or_none
from score_client.errors import ClientError, HTTPError, ValidationError
from score_client.log import get_logger
from score_client.models import ResumeFile, Result, ScoreRequest, ScoreResult, WorkflowState
from score_client.session_store import SessionStore

log = get_logger(__name__)

MISSING_INPUT = "Please upload a resume and provide a job description"
NOT_LOGGED_IN = "Please log in to score a resume"
SCORE_FAILED = "Failed to score resume"

# states in which submit() may start a request, provided both fields are set
_SUBMITTABLE = {WorkflowState.BOTH_READY, WorkflowState.SCORED, WorkflowState.ERROR}


class SubmissionWorkflow:
    def __init__(self, api: ApiClient, store: SessionStore) -> None:
        self.api = api
        self.store = store
        self.state = WorkflowState.EMPTY
        self.resume: ResumeFile | None = None
        self.job_description = ""
        self.result: ScoreResult | None = None
        self.error: ClientError | None = None
        self._state_lock = threading.RLock()
        self._inflight = threading.Lock()
        self._generation = 0

    # ── Views ────────────────────────────────────────────────────────────

    @property
    def has_text(self) -> bool:
        return bool(self.job_description.strip())

    @property
    def busy(self) -> bool:
        return self._inflight.locked()

    @property
    def can_submit(self) -> bool:
        return (
            not self.busy
            and self.state in _SUBMITTABLE
            and self.resume is not None
            and self.has_text
        )

    @property
    def can_reset(self) -> bool:
        return self.resume is not None or bool(self.job_description)

    def steps_completed(self) -> int:
        """Progress out of 3: resume, job description, score."""
        if self.resume is not None and self.has_text:
            return 3 if self.result is not None else 2
        if self.resume is not None or self.has_text:
            return 1
        return 0

    # ── Events ───────────────────────────────────────────────────────────

    def _input_state(self) -> WorkflowState:
        if self.resume is not None and self.has_text:
            return WorkflowState.BOTH_READY
        if self.resume is not None:
            return WorkflowState.RESUME_SELECTED
        if self.has_text:
            return WorkflowState.TEXT_ENTERED
        return WorkflowState.EMPTY

    def select_resume(self, resume: ResumeFile) -> WorkflowState:
        with self._state_lock:
            if self.state is WorkflowState.SUBMITTING:
                log.debug("select_resume ignored while submitting")
                return self.state
            self.resume = resume
            self.result = None
            self.error = None
            self.state = self._input_state()
            log.debug("Resume selected: %s (%d bytes)", resume.filename, len(resume.content))
            return self.state

    def edit_job_description(self, text: str) -> WorkflowState:
        with self._state_lock:
            if self.state is WorkflowState.SUBMITTING:
                log.debug("edit_job_description ignored while submitting")
                return self.state
            self.job_description = text or ""
            self.result = None
            self.error = None
            self.state = self._input_state()
            return self.state

    def reset(self) -> WorkflowState:
        with self._state_lock:
            # a response still in flight belongs to the old generation and is dropped
            self._generation += 1
            self.resume = None
            self.job_description = ""
            self.result = None
            self.error = None
            self.state = WorkflowState.EMPTY
            return self.state

    def submit(self) -> Result[ScoreResult]:
        """Send the resume for scoring; at most one request per instance at a time."""
        if not self._inflight.acquire(blocking=False):
            log.debug("submit ignored: scoring request already in flight")
            return Result.failure(None)
        try:
            return self._submit()
        finally:
            self._inflight.release()

    # ── Internals ────────────────────────────────────────────────────────

    def _prepare(self) -> tuple[ScoreRequest, str, int]:
        with self._state_lock:
            if self.resume is None or not self.has_text:
                raise ValidationError(MISSING_INPUT)
            if self.state not in _SUBMITTABLE:
                raise ValidationError(MISSING_INPUT)
            token = self.store.token
            if not token:
                raise ValidationError(NOT_LOGGED_IN)

            request = ScoreRequest(resume=self.resume, job_description=self.job_description)
            self.result = None
            self.error = None
            self.state = WorkflowState.SUBMITTING
            return request, token, self._generation

    def _submit(self) -> Result[ScoreResult]:
        try:
            request, token, generation = self._prepare()
        except ValidationError as exc:
            log.info("Submit blocked: %s", exc.message)
            return Result.failure(exc)

        log.info("Scoring %s against %d chars of job description",
                 request.resume.filename, len(request.job_description))
        try:
            score = self._score(request, token)
        except ClientError as exc:
            log.error("Error scoring resume: %s", exc.message)
            self._finish(generation, error=exc)
            return Result.failure(exc)

        log.info("Resume scored: %d/100 with %d suggestion(s)", score.value, len(score.suggestions))
        self._finish(generation, result=score)
        return Result.success(score)

    def _score(self, request: ScoreRequest, token: str) -> ScoreResult:
        response = self.api.post_resume(SCORE_PATH, request.resume, request.job_description, token)
        if not response.ok:
            raise http_error(response, "error", "details", fallback=SCORE_FAILED)

        body = json_or_none(response)
        if not isinstance(body, dict):
            log.error("Score response %d is not a JSON object", response.status_code)
            raise HTTPError(
                SCORE_FAILED,
                status=response.status_code,
                reason=response.reason or "",
                body_text=response.text or "",
            )
        try:
            return ScoreResult.from_response(body)
        except ValueError as exc:
            log.error("Malformed score response: %s", exc)
            raise HTTPError(
                SCORE_FAILED,
                status=response.status_code,
                reason=response.reason or "",
                json_body=body,
            ) from exc

    def _finish(
        self,
        generation: int,
        result: ScoreResult | None = None,
        error: ClientError | None = None,
    ) -> None:
        with self._state_lock:
            if generation != self._generation:
                log.debug("Discarding scoring response: workflow was reset")
                return
            self.result = result
            self.error = error
            self.state = WorkflowState.SCORED if error is None else WorkflowState.ERROR
