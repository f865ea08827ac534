import json

import streamlit as st

import config
from conversation import INTERVIEWER, Phase
from interview_engine import InterviewSession
from resume_parser import ResumeInputError, ResumeReadError
from speech_listener import listen_stream, speak, stt_available

config.configure_logging()

st.set_page_config(page_title="AI Interview Simulator", layout="centered")

st.title("🧠 AI Interview Simulator")
st.caption("You are the interviewer | The candidate answers from the uploaded resume | Live Speech-to-Text")

if "session" not in st.session_state:
    st.session_state.session = InterviewSession()
if "live_text" not in st.session_state:
    st.session_state.live_text = ""

session = st.session_state.session

with st.sidebar:
    st.header("Setup")
    services = ["gemini", "openai"]
    session.generator.client.ai_service = st.selectbox(
        "AI Service",
        services,
        index=services.index(config.AI_SERVICE) if config.AI_SERVICE in services else 0,
    )
    speak_answers = st.toggle("Speak answers aloud", value=False)

    st.markdown("---")
    if st.button("New Interview"):
        session.conversation.reset()

    st.markdown("---")
    st.markdown(
        "**Usage**\n"
        "- Upload or paste a resume\n"
        "- Switch to the Interview tab\n"
        "- Type a question or click 🎤 Ask by voice\n"
        "- The candidate answers from the resume"
    )

upload_tab, interview_tab = st.tabs(["Upload Resume", "Interview"])

with upload_tab:
    resume_file = st.file_uploader("Upload a resume (PDF, DOCX or TXT)", type=["pdf", "docx", "txt"])
    pasted_text = st.text_area("...or paste the resume text", height=200)

    if st.button("Analyze Resume"):
        try:
            with st.spinner("Reading resume…"):
                session.load_resume(document=resume_file, text=pasted_text)
        except ResumeInputError as exc:
            st.warning(str(exc))
        except ResumeReadError as exc:
            st.error(f"⚠️ Could not read the resume: {exc}")
        else:
            st.success("Resume analyzed. Open the Interview tab to start.")

    if session.record is not None:
        with st.expander("Extracted resume data", expanded=False):
            st.json(session.record.to_dict())

with interview_tab:
    if session.record is None:
        st.info("No resume loaded yet. The candidate will answer from a default profile.")

    stt_is_ready, stt_service = stt_available()
    voice_question = None

    if st.button("🎤 Ask by voice", disabled=not stt_is_ready):
        live_box = st.empty()
        final_text = ""
        for transcript in listen_stream(stt_service):
            st.session_state.live_text = transcript.text
            live_box.text_area("Listening…", value=transcript.text, height=100)
            if transcript.is_final:
                final_text = transcript.text
        voice_question = final_text
    if not stt_is_ready:
        st.caption(f"Voice input unavailable in this environment: {stt_service}")

    typed_question = st.chat_input(
        "Ask the candidate a question…", disabled=session.conversation.phase is Phase.ANSWERING
    )
    question = typed_question if typed_question is not None else voice_question

    if question is not None:
        history_size = len(session.conversation.history)
        with st.spinner("The candidate is thinking…"):
            answer = session.ask(question)
        if len(session.conversation.history) == history_size:
            st.info(answer)
        elif speak_answers:
            speak(answer)

    for turn in session.conversation.history:
        with st.chat_message("user" if turn.role == INTERVIEWER else "assistant"):
            st.markdown(turn.content)

    if session.conversation.history:
        st.download_button(
            "Download transcript",
            data=json.dumps(session.conversation.to_dict(), indent=2),
            file_name="sessions.json",
            mime="application/json",
        )
