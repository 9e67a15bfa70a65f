from __future__ import annotations

import asyncio
import json
import logging
from dataclasses import asdict

import pandas as pd
import streamlit as st

from tradefit.catalog import get_skills_by_trade, load_catalog, trades
from tradefit.companion import VideoAssistant, demo_questions
from tradefit.config import settings
from tradefit.errors import ResumeExtractionError
from tradefit.parsers import extract_skills
from tradefit.ranking import concept_search
from tradefit.recommendations import journey_summary, next_steps, recommend_trades
from tradefit.scoring import fit_band, matched_skills, motivational_message
from tradefit.session import QUESTIONNAIRE, DemoController, ManualScheduler, Session, format_scale_answer
from tradefit.transcripts import format_time, guide_transcript, sample_transcript, segment_at

logging.basicConfig(level=settings.log_level, format="%(asctime)s | %(name)s | %(levelname)s | %(message)s")

APP_TITLE = "TradeFit"
APP_SUBTITLE = "Find out how ready you are for a skilled trade"
TRADE_LABELS = {"plumber": "Plumber", "electrician": "Electrician"}
PRIORITY_ICONS = {"high": "🔴", "medium": "🟠", "low": "🟢"}
FIT_BAND_LABELS = {"excellent": "Excellent match", "great": "Great potential", "good": "Good foundation", "beginner": "Getting started"}


def ensure_state():
    if "session" not in st.session_state:
        st.session_state["session"] = Session()
    if "chat" not in st.session_state:
        st.session_state["chat"] = []
    if "video_start" not in st.session_state:
        st.session_state["video_start"] = 0


def current_session() -> Session:
    return st.session_state["session"]


def inject_styles():
    st.markdown(
        """
        <style>
        .hero-wrap {
            background: radial-gradient(circle at 20% 20%, #667eea 0%, #4c51bf 40%, #1a202c 100%);
            border-radius: 18px;
            padding: 28px;
            color: #f7fafc;
            margin-bottom: 18px;
        }
        .hero-title { font-size: 2.2rem; font-weight: 700; margin-bottom: 0.4rem; }
        .hero-sub { opacity: 0.92; font-size: 1.03rem; }
        </style>
        """,
        unsafe_allow_html=True,
    )


def export_payload(session: Session) -> dict:
    return {
        "trade": session.selected_trade,
        "resume_skills": session.resume_skills,
        "answers": asdict(session.answers),
        "compatibility_score": session.compatibility_score,
        "used_sample_profile": session.used_sample_profile,
        "skill_gaps": [asdict(g) for g in session.skill_gaps],
        "journey": [asdict(n) for n in session.journey],
        "learning_progress": session.learning_progress,
    }


def seek_video(timestamp: int):
    st.session_state["video_start"] = int(timestamp)
    current_session().mark_watched(int(timestamp))


def render_trade_selection(session: Session):
    st.markdown(
        f"""
        <div class="hero-wrap">
          <div class="hero-title">{APP_TITLE}</div>
          <div class="hero-sub">{APP_SUBTITLE}</div>
        </div>
        """,
        unsafe_allow_html=True,
    )
    options = trades()
    index = options.index(session.selected_trade) if session.selected_trade in options else 0
    trade = st.radio("Which trade are you considering?", options, index=index, format_func=lambda t: TRADE_LABELS.get(t, t.title()))
    if st.button("Select trade"):
        session.select_trade(trade)
        st.success(f"Selected {TRADE_LABELS.get(trade, trade)}. Upload your resume next.")

    skills_df = pd.DataFrame(
        [{"Skill": s.name, "Category": s.category, "Importance": s.importance} for s in get_skills_by_trade(trade)]
    )
    st.dataframe(skills_df, hide_index=True, use_container_width=True)


def render_resume_upload(session: Session):
    uploaded_file = st.file_uploader("Upload your resume", type=["pdf", "doc", "docx"])
    if uploaded_file is not None and st.button("Analyze resume"):
        session.is_analyzing = True
        try:
            with st.spinner("Extracting your skills and experience..."):
                skills = asyncio.run(extract_skills(uploaded_file, rng=session.rng))
        except ResumeExtractionError as exc:
            st.error(str(exc))
        else:
            session.set_resume(uploaded_file.name, skills)
            st.success(f"Resume analyzed successfully! {len(skills)} relevant skills identified.")
        finally:
            session.is_analyzing = False

    if session.resume_skills:
        st.write(", ".join(session.resume_skills))
        recos = recommend_trades(session.resume_skills, load_catalog())
        st.dataframe(
            pd.DataFrame([{"Trade": TRADE_LABELS.get(t, t), "Match %": score} for t, score in recos]),
            hide_index=True,
            use_container_width=True,
        )


def render_questionnaire(session: Session):
    with st.form("questionnaire_form"):
        values: dict[str, str] = {}
        for number, item in enumerate(QUESTIONNAIRE, start=1):
            st.markdown(f"**Question {number} of {len(QUESTIONNAIRE)}.** {item['question']}")
            existing = getattr(session.answers, item["key"])
            if item["type"] == "scale":
                rating_text, _, explanation = existing.partition(" - ")
                rating = int(rating_text) if rating_text.isdigit() else 5
                rating = st.slider("Comfort (1-10)", 1, 10, rating, key=f"q_{item['key']}_rating")
                explanation = st.text_input(item["placeholder"], value=explanation, key=f"q_{item['key']}_text")
                values[item["key"]] = format_scale_answer(rating, explanation)
            else:
                values[item["key"]] = st.text_area(item["placeholder"], value=existing, key=f"q_{item['key']}")
        if st.form_submit_button("Save answers"):
            for key, value in values.items():
                session.update_answer(key, value)
            st.success("Answers saved. Open Results to see your compatibility.")


def render_video_assistant(session: Session):
    transcript = sample_transcript()
    st.video(f"https://www.youtube.com/watch?v={transcript.video_id}", start_time=st.session_state["video_start"])
    segment = segment_at(transcript, st.session_state["video_start"])
    if segment is not None:
        st.caption(f"[{format_time(segment.start_time)}] {segment.text}")

    assistant = VideoAssistant(transcript, rng=session.rng)
    for idx, entry in enumerate(st.session_state["chat"]):
        with st.chat_message("user" if entry["is_user"] else "assistant"):
            st.write(entry["text"])
            for ts in entry.get("timestamps", []):
                st.button(f"▶ {format_time(ts)}", key=f"seek_{idx}_{ts}", on_click=seek_video, args=(ts,))
            for suggestion in entry.get("suggestions", []):
                st.caption(f"Try: {suggestion}")

    with st.form("ask_video_form", clear_on_submit=True):
        question = st.text_input("Ask about this video")
        submitted = st.form_submit_button("Ask")
    if submitted and question.strip():
        response = session.ask(question, assistant)
        st.session_state["chat"].append({"text": question, "is_user": True})
        st.session_state["chat"].append(
            {
                "text": response.message,
                "is_user": False,
                "timestamps": [t.timestamp for t in response.timestamps],
                "suggestions": response.suggested_questions,
            }
        )
        if response.should_auto_play and response.timestamps:
            seek_video(response.timestamps[0].timestamp)
        st.rerun()

    c1, c2 = st.columns(2)
    if c1.button("Play scripted demo"):
        scheduler = ManualScheduler()
        messages: list[dict] = []

        def attach_timestamps(stamps: list[int]):
            messages[-1]["timestamps"] = stamps

        controller = DemoController(
            scheduler,
            assistant=assistant,
            on_message=lambda text, is_user: messages.append({"text": text, "is_user": is_user}),
            on_timestamps=attach_timestamps,
        )
        controller.start()
        scheduler.run_all()
        st.session_state["chat"].extend(messages)
        st.rerun()
    if c2.button("Clear chat"):
        st.session_state["chat"] = []
        st.rerun()
    st.caption("Scripted questions: " + " | ".join(demo_questions()))


def render_results(session: Session):
    if st.button("Analyze compatibility") or not session.journey:
        session.analyze()
    if session.used_sample_profile:
        st.info("No trade or resume yet, so results use the sample electrician profile.")

    trade = session.selected_trade or "electrician"
    with st.expander("Section A - Compatibility", expanded=True):
        c1, c2 = st.columns(2)
        c1.metric("Compatibility", f"{session.compatibility_score}%")
        c1.progress(session.compatibility_score / 100.0)
        c1.caption(FIT_BAND_LABELS[fit_band(session.compatibility_score)])
        c2.write(motivational_message(session.compatibility_score))
        matched = matched_skills(session.resume_skills, trade)
        if matched:
            c2.write("Matched skills: " + ", ".join(matched))

        gap_df = pd.DataFrame(
            [
                {"Skill": g.skill, "Current": g.current_level, "Required": g.required_level, "Gap": g.required_level - g.current_level}
                for g in session.skill_gaps
            ]
        )
        if not gap_df.empty:
            st.bar_chart(gap_df.set_index("Skill")[["Current", "Required"]])
            st.dataframe(gap_df, use_container_width=True, hide_index=True)

    with st.expander("Section B - Learning Journey", expanded=True):
        summary = journey_summary(session.journey)
        st.write(f"Estimated total: {summary['total_hours']} hours")
        for node in session.journey:
            cols = st.columns([4, 2, 2, 2])
            progress = session.learning_progress.get(node.skill, 0)
            label = f"{PRIORITY_ICONS[node.priority]} {node.skill} ({node.current_level} → {node.target_level})"
            if node.prerequisites:
                label += f" · after {', '.join(node.prerequisites)}"
            cols[0].write(label)
            cols[1].write(f"{node.estimated_hours} h")
            cols[2].progress(progress / 100.0)
            if node.skill in session.completed_skills:
                cols[3].write("✅ Done")
            elif session.current_learning_skill == node.skill:
                if cols[3].button("Complete", key=f"complete_{node.skill}"):
                    session.complete_skill(node.skill)
                    st.rerun()
            elif cols[3].button("Start", key=f"start_{node.skill}"):
                session.start_learning(node.skill)
                st.rerun()
        for step in next_steps(session.skill_gaps):
            st.write(f"- **{step['title']}**: {step['description']}")

    with st.expander("Section C - Video Assistant", expanded=bool(session.current_learning_skill)):
        render_video_assistant(session)

    with st.expander("Section D - Search the Full Guide", expanded=False):
        guide = guide_transcript()
        query = st.text_input("Search the full guide", value="How to calculate current?")
        matches = concept_search(query, guide)
        st.dataframe(
            pd.DataFrame(
                [{"Time": m.time_display, "Relevance %": round(m.relevance * 100, 1), "Preview": m.preview} for m in matches]
            ),
            use_container_width=True,
            hide_index=True,
        )

    st.download_button(
        "Download results JSON",
        data=json.dumps(export_payload(session), indent=2),
        file_name="tradefit_results.json",
        mime="application/json",
    )


st.set_page_config(page_title=APP_TITLE, layout="wide")
inject_styles()
st.title(APP_TITLE)
st.caption(APP_SUBTITLE)
ensure_state()
session = current_session()

with st.sidebar:
    st.markdown("### Session")
    page = st.radio("Go to", ["Choose Trade", "Resume", "Questionnaire", "Results"])
    if session.selected_trade:
        st.success(f"Trade: {TRADE_LABELS.get(session.selected_trade, session.selected_trade)}")
    if st.button("Start over"):
        session.reset()
        st.session_state["chat"] = []
        st.session_state["video_start"] = 0
        st.rerun()

if page == "Choose Trade":
    render_trade_selection(session)
elif page == "Resume":
    render_resume_upload(session)
elif page == "Questionnaire":
    render_questionnaire(session)
else:
    render_results(session)
