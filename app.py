"""Streamlit UI for the Resume Score client."""
from __future__ import annotations

import sys
from pathlib import Path

import streamlit as st

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
from score_client.guard import DASHBOARD_ROUTE, LOGIN_ROUTE, SIGNUP_ROUTE
from score_client.log import configure_logging, get_logger
from score_client.models import ResumeFile, WorkflowState

log = get_logger(__name__)

# ── Helpers ──────────────────────────────────────────────────────────────


@st.cache_resource
def _shared():
    """One settings/store/API client per server process."""
    settings = load_settings()
    configure_logging(settings)
    store = open_session_store(settings)
    return settings, store, ApiClient(settings)


def _per_user(key: str, factory):
    """Gateways and the workflow live in the browser session."""
    if key not in st.session_state:
        st.session_state[key] = factory()
    return st.session_state[key]


def _gateway(key: str) -> AuthGateway:
    _, store, api = _shared()
    return _per_user(key, lambda: AuthGateway(api, store))


def _workflow() -> SubmissionWorkflow:
    _, store, api = _shared()
    return _per_user("_workflow", lambda: SubmissionWorkflow(api, store))


def _guard() -> ProtectedRouteGuard:
    _, store, _ = _shared()
    return ProtectedRouteGuard(store)


def _go(route: str) -> None:
    st.switch_page(PAGES[route])


def _flash(message: str) -> None:
    st.session_state["_flash"] = message


def _show_flash() -> None:
    message = st.session_state.pop("_flash", "")
    if message:
        st.success(message)


# ── Page: Signup ─────────────────────────────────────────────────────────


def page_signup() -> None:
    st.header("Create Account")
    gateway = _gateway("_signup_gateway")

    with st.form("signup"):
        name = st.text_input("Full Name", placeholder="Enter your full name")
        email = st.text_input("Email Address", placeholder="Enter your email")
        password = st.text_input("Password", type="password", placeholder="Create a secure password")
        submitted = st.form_submit_button(
            "Creating Account..." if gateway.busy else "Create Account",
            type="primary",
            use_container_width=True,
            disabled=gateway.busy,
        )

    if submitted:
        with st.spinner("Creating account…"):
            result = gateway.signup(name, email, password)
        if result.ok:
            _flash(result.notice)
            _go(result.redirect or LOGIN_ROUTE)
        elif result.error is not None:
            st.error(result.message)

    st.caption("Already have an account?")
    st.page_link(PAGES[LOGIN_ROUTE], label="Sign in here")


# ── Page: Login ──────────────────────────────────────────────────────────


def page_login() -> None:
    st.header("Welcome Back")
    _show_flash()
    gateway = _gateway("_login_gateway")

    with st.form("login"):
        email = st.text_input("Email Address", placeholder="Enter your email")
        password = st.text_input("Password", type="password", placeholder="Enter your password")
        submitted = st.form_submit_button(
            "Signing In..." if gateway.busy else "Sign In",
            type="primary",
            use_container_width=True,
            disabled=gateway.busy,
        )

    if submitted:
        with st.spinner("Signing in…"):
            result = gateway.login(email, password)
        if result.ok:
            _go(result.redirect or DASHBOARD_ROUTE)
        elif result.error is not None:
            st.error(result.message)

    st.caption("Don't have an account?")
    st.page_link(PAGES[SIGNUP_ROUTE], label="Create one here")


# ── Page: Dashboard ──────────────────────────────────────────────────────


def _sync_inputs(wf: SubmissionWorkflow) -> None:
    uploaded = st.file_uploader("Upload Resume (PDF)", type=["pdf"], key="_resume_upload")
    if uploaded is not None:
        current = wf.resume
        if current is None or current.filename != uploaded.name or len(current.content) != uploaded.size:
            wf.select_resume(
                ResumeFile(
                    filename=uploaded.name,
                    content=uploaded.getvalue(),
                    mime_type=uploaded.type or "application/pdf",
                )
            )
    if wf.resume is not None:
        st.caption(f"📄 {wf.resume.filename}")

    text = st.text_area(
        "Job Description",
        value=wf.job_description,
        height=220,
        placeholder="Paste the job description here...",
    )
    if text != wf.job_description:
        wf.edit_job_description(text)


def _render_score(wf: SubmissionWorkflow) -> None:
    score = wf.result
    if score is None:
        st.info("No score yet — upload your resume and add a job description to get started.")
        return

    st.metric("Compatibility Score", f"{score.value}/100")
    st.progress(score.value / 100)

    if score.suggestions:
        st.subheader("Improvement Suggestions")
        for idx, suggestion in enumerate(score.suggestions, start=1):
            st.markdown(f"{idx}. {suggestion}")

    if score.support:
        st.subheader("Helpful Resources")
        for link in score.support:
            st.markdown(f"- [{link}]({link})")


def page_dashboard() -> None:
    st.header("Resume Score")
    st.write(
        "Upload your resume and job description to get a compatibility score "
        "with personalized improvement suggestions."
    )
    wf = _workflow()

    left, right = st.columns(2)
    with left:
        _sync_inputs(wf)

        c1, c2 = st.columns(2)
        with c1:
            score_clicked = st.button(
                "Analyzing..." if wf.busy else "Get Score",
                type="primary",
                use_container_width=True,
                disabled=not wf.can_submit,
            )
        with c2:
            if wf.can_reset and st.button("Reset", use_container_width=True):
                wf.reset()
                st.session_state.pop("_resume_upload", None)
                st.rerun()

        if score_clicked:
            with st.spinner("Scoring your resume…"):
                result = wf.submit()
            if not result.ok and result.error is not None:
                st.error(f"Failed to score resume: {result.message}")

        if wf.state is WorkflowState.ERROR and wf.error is not None and not score_clicked:
            st.error(f"Failed to score resume: {wf.error.message}")

        st.caption(f"{wf.steps_completed()}/3 steps completed")

    with right:
        _render_score(wf)


# ── Main ─────────────────────────────────────────────────────────────────


def _sidebar_session() -> None:
    _, store, _ = _shared()
    session = store.load()
    with st.sidebar:
        if session is None:
            st.caption("Not signed in")
            return
        st.markdown(f"**{session.user.name or session.user.email}**")
        if session.user.email:
            st.caption(session.user.email)
        if st.button("Sign out", use_container_width=True):
            store.clear()
            st.session_state.pop("_workflow", None)
            _go(LOGIN_ROUTE)


def _wrap_signup():
    _sidebar_session()
    page_signup()


def _wrap_login():
    _sidebar_session()
    page_login()


def _wrap_dashboard():
    decision = _guard().resolve(DASHBOARD_ROUTE)
    if decision.redirect:
        log.info("Dashboard requested without a session — redirecting to login")
        _go(decision.redirect)
        return
    _sidebar_session()
    page_dashboard()


PAGES = {
    LOGIN_ROUTE: st.Page(_wrap_login, title="Login", icon="🔑", url_path="login", default=True),
    SIGNUP_ROUTE: st.Page(_wrap_signup, title="Signup", icon="📝", url_path="signup"),
    DASHBOARD_ROUTE: st.Page(_wrap_dashboard, title="Dashboard", icon="📊", url_path="dashboard"),
}

nav = st.navigation(list(PAGES.values()))
nav.run()
