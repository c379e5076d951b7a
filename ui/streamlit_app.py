# Role: Streamlit investment-analysis page.
# - SessionController (in st.session_state) is authoritative for form, query, transcript and busy flag.
# - Widgets only mirror it: edits go in through callbacks, values come back out after each submit.

from __future__ import annotations

import streamlit as st
import streamlit.components.v1 as components

import investment_advisor.config as config
from investment_advisor.config import ConfigError
from investment_advisor.core.report_exporter import ExportResult, export_report
from investment_advisor.core.session_controller import SessionController
from investment_advisor.llm.gemini_client import GeminiClient
from investment_advisor.models.form_state import FIELD_LABELS, RISK_LEVELS
from investment_advisor.models.message import ChatTurn
from investment_advisor.utils.markdown_blocks import split_markdown

DISCLAIMER = (
    "⚠️ Disclaimer: This AI may make mistakes. Investment and market decisions are subject to risks. "
    "Please verify all information on official sources before making any decisions."
)

_CONTROLLER_KEY = "controller"
_PENDING_KEY = "pending_submit"
_SYNC_KEY = "sync_form"
_SCROLL_KEY = "scroll_to_latest"
_QUERY_KEY = "query_text"

# Brings the newest chat message into view inside Streamlit's own scroll container.
SCROLL_SCRIPT = """
<script>
const doc = window.parent.document;
const turns = doc.querySelectorAll('[data-testid="stChatMessage"]');
if (turns.length) {
  turns[turns.length - 1].scrollIntoView({ behavior: 'smooth', block: 'end' });
}
</script>
"""


def _field_key(name: str) -> str:
    return f"field_{name}"


# ----------------------------
# Session helpers
# ----------------------------
@st.cache_resource
def get_client() -> GeminiClient:
    # Key line: built once per process; raises ConfigError when GEMINI_API_KEY is missing.
    return GeminiClient()


def _mark_scroll(_transcript: list[ChatTurn]) -> None:
    st.session_state[_SCROLL_KEY] = True


def ensure_session(client: GeminiClient) -> SessionController:
    if _CONTROLLER_KEY not in st.session_state:
        st.session_state[_CONTROLLER_KEY] = SessionController(client=client, on_transcript_change=_mark_scroll)
        st.session_state[_SYNC_KEY] = True
    if _PENDING_KEY not in st.session_state:
        st.session_state[_PENDING_KEY] = False
    if _SCROLL_KEY not in st.session_state:
        st.session_state[_SCROLL_KEY] = False
    return st.session_state[_CONTROLLER_KEY]


def sync_widgets(ctrl: SessionController) -> None:
    # Role: push controller values into widget keys. Only safe before the widgets are drawn in this run.
    for name, value in ctrl.form.model_dump().items():
        st.session_state[_field_key(name)] = value
    st.session_state[_QUERY_KEY] = ctrl.derived_query


# ----------------------------
# Widget callbacks
# ----------------------------
def _on_field_change(name: str) -> None:
    ctrl: SessionController = st.session_state[_CONTROLLER_KEY]
    ctrl.update_field(name, st.session_state[_field_key(name)])
    st.session_state[_QUERY_KEY] = ctrl.derived_query


def _on_query_edit() -> None:
    ctrl: SessionController = st.session_state[_CONTROLLER_KEY]
    ctrl.edit_derived_query(st.session_state[_QUERY_KEY])


def _on_send() -> None:
    st.session_state[_PENDING_KEY] = True


def _on_new_session() -> None:
    del st.session_state[_CONTROLLER_KEY]
    st.session_state[_PENDING_KEY] = False


# ----------------------------
# Transcript
# ----------------------------
def render_turn(turn: ChatTurn) -> None:
    with st.chat_message(turn.role, avatar="🤖" if turn.is_ai else None):
        for segment in split_markdown(turn.text):
            if segment.kind == "code":
                st.code(segment.text, language=segment.language)
            else:
                st.markdown(segment.text)


def render_transcript(ctrl: SessionController) -> None:
    if not ctrl.transcript:
        st.info("Fill in the investment details below and click **Get Full Analysis**.")
    for turn in ctrl.transcript:
        render_turn(turn)


def scroll_to_latest() -> None:
    if not st.session_state.get(_SCROLL_KEY):
        return
    st.session_state[_SCROLL_KEY] = False
    components.html(SCROLL_SCRIPT, height=0)


# ----------------------------
# Form
# ----------------------------
def render_form(ctrl: SessionController, busy: bool) -> None:
    st.text_input(
        FIELD_LABELS["company_share"],
        key=_field_key("company_share"),
        placeholder="Company Share Name (e.g., TCS, Infosys)",
        on_change=_on_field_change,
        args=("company_share",),
        label_visibility="collapsed",
        disabled=busy,
    )

    col1, col2 = st.columns(2)
    with col1:
        st.text_input(
            FIELD_LABELS["share_type"],
            key=_field_key("share_type"),
            placeholder="Share Type (Stocks, Bonds, ETFs)",
            on_change=_on_field_change,
            args=("share_type",),
            label_visibility="collapsed",
            disabled=busy,
        )
    with col2:
        st.text_input(
            FIELD_LABELS["investment_type"],
            key=_field_key("investment_type"),
            placeholder="Investment Type (Growth, Dividend)",
            on_change=_on_field_change,
            args=("investment_type",),
            label_visibility="collapsed",
            disabled=busy,
        )

    col3, col4 = st.columns(2)
    with col3:
        st.text_input(
            FIELD_LABELS["investment_years"],
            key=_field_key("investment_years"),
            placeholder="Investment Years",
            on_change=_on_field_change,
            args=("investment_years",),
            label_visibility="collapsed",
            disabled=busy,
        )
    with col4:
        st.selectbox(
            FIELD_LABELS["risk_appetite"],
            RISK_LEVELS,
            key=_field_key("risk_appetite"),
            format_func=lambda level: f"{level.capitalize()} Risk",
            on_change=_on_field_change,
            args=("risk_appetite",),
            label_visibility="collapsed",
            disabled=busy,
        )

    st.text_input(
        FIELD_LABELS["investment_amount"],
        key=_field_key("investment_amount"),
        placeholder="Investment Amount (₹)",
        on_change=_on_field_change,
        args=("investment_amount",),
        label_visibility="collapsed",
        disabled=busy,
    )

    st.text_area(
        "Combined query",
        key=_QUERY_KEY,
        height=140,
        placeholder="Edit your combined investment query here...",
        on_change=_on_query_edit,
        label_visibility="collapsed",
        disabled=busy,
    )

    col_send, col_download = st.columns(2)
    with col_send:
        st.button(
            "Analyzing Investment..." if busy else "Get Full Analysis",
            key="send_analysis",
            on_click=_on_send,
            disabled=busy,
            type="primary",
            use_container_width=True,
        )
    with col_download:
        if ctrl.last_report:
            render_download(ctrl.last_report, disabled=busy)


@st.cache_data(show_spinner=False)
def _build_report(text: str) -> ExportResult:
    return export_report(text)


def render_download(report_text: str, disabled: bool) -> None:
    result = _build_report(report_text)
    if not result.ok:
        st.warning(result.message)
        return
    st.download_button(
        "⬇ Download Report",
        data=result.data,
        file_name=result.filename,
        mime=result.mime,
        disabled=disabled,
        use_container_width=True,
    )


# ----------------------------
# Sidebar
# ----------------------------
def render_sidebar(ctrl: SessionController, busy: bool) -> None:
    st.sidebar.title("Your plan")
    st.sidebar.button("📝 New session", on_click=_on_new_session, disabled=busy, use_container_width=True)
    st.sidebar.divider()

    snap = ctrl.snapshot()
    st.sidebar.metric("Analyses requested", snap["submit_count"])
    st.sidebar.caption("Report ready for download." if snap["has_report"] else "No report generated yet.")
    if snap["query_overridden"]:
        st.sidebar.caption("Using your edited query.")


# ----------------------------
# Main
# ----------------------------
def main() -> None:
    st.set_page_config(page_title="Investment Advisor", page_icon="🤖", layout="wide")
    config.load_env()

    st.title("🤖 Investment Advisor")
    st.caption("Describe an investment and get a full AI analysis you can download as a PDF.")

    try:
        client = get_client()
    except ConfigError as e:
        st.error(f"Configuration error: {e}. Set it in your environment or a .env file and restart.")
        st.stop()

    ctrl = ensure_session(client)
    if st.session_state.get(_SYNC_KEY):
        sync_widgets(ctrl)
        st.session_state[_SYNC_KEY] = False

    busy: bool = st.session_state[_PENDING_KEY] or ctrl.is_loading

    render_sidebar(ctrl, busy)
    render_transcript(ctrl)
    pending_slot = st.empty()
    scroll_to_latest()

    st.divider()
    render_form(ctrl, busy)
    st.caption(DISCLAIMER)

    if not st.session_state[_PENDING_KEY]:
        return

    # Key lines: the form is already drawn disabled. The controller resets its form inside submit(), so the
    # widget resync is requested first; a rerun that interrupts this run still picks it up.
    st.session_state[_PENDING_KEY] = False
    st.session_state[_SYNC_KEY] = True
    with pending_slot.container():
        with st.chat_message("assistant", avatar="🤖"):
            with st.spinner("Analyzing Investment..."):
                ctrl.submit()

    st.rerun()


if __name__ == "__main__":
    main()
