# main.py
import streamlit as st
import logging
from datetime import datetime
from config import Config
from chat_manager import ChatManager
from file_processor import FileProcessor
from llm_client import CompletionClient
from issues import COMMON_ISSUES, issue_question
from feedback import Feedback, RATINGS

# Configuration du logging
logging.basicConfig(
    level=Config.LOG_LEVEL,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    handlers=[
        logging.FileHandler(Config.LOG_FILE),
        logging.StreamHandler()
    ]
)
logger = logging.getLogger(__name__)

MISSING_PARAMETERS_ERROR = (
    "Could not find slicing parameters in the 3MF file. Make sure the file contains "
    "a project_settings.config in the Metadata directory."
)
EXTRACTION_ERROR = "Error extracting slicing parameters from the 3MF file"


def init_session_state():
    defaults = {
        'file_uploaded': False,
        'file_metadata': None,
        'slicing_parameters': None,
        'analysis_error': None,
        'processing': False,
        'pending_question': "",
        'uploader_key': 0,
        'feedback_submitted': False,
    }
    for key, value in defaults.items():
        if key not in st.session_state:
            st.session_state[key] = value


def initialize_system():
    """Initialise les composants système avec gestion des erreurs"""
    try:
        config = Config()
        Config.ensure_directories()

        if 'chat_manager' not in st.session_state:
            st.session_state.chat_manager = ChatManager(config.CHAT_STORAGE_DIR, config.CHAT_HISTORY_KEY)

        file_processor = FileProcessor(config)
        return config, st.session_state.chat_manager, file_processor

    except Exception as e:
        logger.error(f"System initialization error: {e}")
        raise


def reset_file_state():
    st.session_state.file_uploaded = False
    st.session_state.file_metadata = None
    st.session_state.slicing_parameters = None
    st.session_state.analysis_error = None
    # Nouvelle clé pour vider le widget d'upload
    st.session_state.uploader_key += 1


def handle_file_upload(uploaded_file, file_processor, chat_manager):
    st.session_state.analysis_error = None

    if not file_processor.validate(uploaded_file):
        st.session_state.analysis_error = (
            f"{uploaded_file.name} exceeds the maximum allowed size ({Config.MAX_FILE_SIZE_MB}MB)"
        )
        st.session_state.uploader_key += 1
        return

    st.session_state.file_metadata = file_processor.build_metadata(uploaded_file)

    try:
        with st.spinner("Analyzing 3MF file..."):
            parameters = file_processor.process_file(uploaded_file)
        st.session_state.slicing_parameters = parameters

        if parameters is not None:
            chat_manager.add_file_context(parameters)
        else:
            st.session_state.analysis_error = MISSING_PARAMETERS_ERROR

    except Exception as e:
        logger.error(f"Error extracting slicing parameters: {e}")
        st.session_state.analysis_error = EXTRACTION_ERROR

    finally:
        st.session_state.file_uploaded = True
        chat_manager.announce_upload()


def send_question(question, chat_manager, client):
    if not question or not question.strip() or st.session_state.processing:
        return

    st.session_state.processing = True
    try:
        with st.spinner("Thinking..."):
            chat_manager.process_question(question, client, st.session_state.file_uploaded)
    finally:
        st.session_state.processing = False
        st.session_state.pending_question = ""


def render_feedback(config):
    with st.popover("Feedback", icon=":material/chat:"):
        if not st.session_state.feedback_submitted:
            st.markdown("**Send Feedback**")
            st.caption("Help us improve our 3D print debugger by sharing your experience.")
            rating = st.radio(
                "How helpful was the AI assistant?",
                RATINGS,
                index=None,
                horizontal=True,
                captions=["Poor", "", "", "", "Great"],
                key="feedback_rating",
            )
            st.text_area(
                "Your feedback",
                placeholder="Tell us what went well or what we could improve...",
                key="feedback_text",
            )
            st.text_input("Your email (optional)", placeholder="your.email@example.com", key="feedback_email")

            feedback = current_feedback(rating)
            if st.button("Continue", disabled=feedback.is_empty()):
                st.session_state.feedback_submitted = True
                st.rerun()
        else:
            feedback = current_feedback(st.session_state.get("feedback_rating"))
            st.markdown("**Send your feedback via email**")
            st.caption("Copy your feedback or open your email client to send it.")
            st.code(feedback.to_text(), language=None)
            st.markdown(f"Send to: `{config.FEEDBACK_EMAIL}`")
            st.link_button("Open Email Client", feedback.mailto_link(config.FEEDBACK_EMAIL), icon=":material/mail:")


def current_feedback(rating):
    return Feedback(
        rating=rating,
        text=st.session_state.get("feedback_text", ""),
        email=st.session_state.get("feedback_email", ""),
    )


def render_file_section(file_processor, chat_manager, client):
    if not st.session_state.file_uploaded:
        st.subheader("Upload a 3MF File")
        uploaded_file = st.file_uploader(
            "Upload 3MF File",
            type=["3mf"],
            key=f"uploader_{st.session_state.uploader_key}",
            help=f"Taille maximale: {Config.MAX_FILE_SIZE_MB}MB",
        )
        if uploaded_file is not None:
            handle_file_upload(uploaded_file, file_processor, chat_manager)
            st.rerun()
        if st.session_state.analysis_error:
            st.error(st.session_state.analysis_error)
        return

    if st.session_state.analysis_error:
        st.warning(st.session_state.analysis_error)

    metadata = st.session_state.file_metadata
    if metadata:
        st.subheader("3MF File Information")
        with st.container(border=True):
            col1, col2 = st.columns([4, 1])
            with col1:
                st.markdown(f"**{metadata.name}**")
                st.caption(f"{metadata.size} · {metadata.type}")
                st.caption(f"Last modified: {metadata.last_modified}")
            with col2:
                if st.button("Upload New", key="upload_new"):
                    reset_file_state()
                    st.rerun()

    if st.session_state.slicing_parameters is not None:
        with st.expander("Slicing parameters", expanded=False):
            st.json(st.session_state.slicing_parameters)

    st.subheader("Common 3D Printing Issues")
    st.caption("Click on an issue to get help")
    cols = st.columns(2)
    for idx, issue in enumerate(COMMON_ISSUES):
        with cols[idx % 2]:
            if st.button(
                issue.name,
                key=f"issue_{idx}",
                help=issue.description,
                icon=issue.icon,
                use_container_width=True,
                disabled=st.session_state.processing,
            ):
                question = issue_question(issue.name)
                st.session_state.pending_question = question
                if st.session_state.file_uploaded:
                    send_question(question, chat_manager, client)
                st.rerun()


def render_chat(chat_manager, client):
    col1, col2 = st.columns([4, 1])
    with col1:
        st.subheader("Chat")
    with col2:
        if st.button("Clear Chat", disabled=st.session_state.processing, use_container_width=True):
            chat_manager.clear_history()
            st.rerun()

    with st.container(height=520):
        for message in chat_manager.visible_messages:
            with st.chat_message(message.role):
                timestamp = datetime.fromisoformat(message.timestamp).strftime("%H:%M:%S")
                st.caption(timestamp)
                if message.role == "assistant":
                    st.markdown(message.content)
                else:
                    st.text(message.content)

    if st.session_state.pending_question:
        st.caption(f"Suggested question: {st.session_state.pending_question}")
        if st.button("Send suggested question", disabled=st.session_state.processing):
            send_question(st.session_state.pending_question, chat_manager, client)
            st.rerun()

    if prompt := st.chat_input(
        "Type your message...",
        key="chat_input",
        disabled=st.session_state.processing,
    ):
        send_question(prompt, chat_manager, client)
        st.rerun()


def main():
    try:
        st.set_page_config(
            page_title="3D Print Debugger",
            layout="wide",
            initial_sidebar_state="collapsed"
        )

        init_session_state()
        config, chat_manager, file_processor = initialize_system()

        with st.sidebar:
            st.title("3D Print Debugger")

            with st.expander("Configuration", expanded=False):
                st.code(Config.describe(), language=None)

            client = CompletionClient(config)
            available_models = client.available_models()
            if available_models:
                selected_model = st.selectbox(
                    "Model",
                    available_models,
                    help="Choose the AI model to use"
                )
                client = CompletionClient(config, model=selected_model)

        header, feedback_col = st.columns([5, 1])
        with header:
            st.title("3D Print Debugger")
            st.caption("Upload your 3MF file and chat with an AI to debug your 3D print")
        with feedback_col:
            render_feedback(config)

        left, right = st.columns(2, gap="large")
        with left:
            render_file_section(file_processor, chat_manager, client)
        with right:
            render_chat(chat_manager, client)

    except Exception as e:
        logger.error(f"Main application error: {e}")
        st.error("A critical error occurred. Please refresh the page.")

if __name__ == "__main__":
    try:
        main()
    except KeyboardInterrupt:
        logger.info("Application stopped by user")
    except Exception as e:
        logger.critical(f"Critical error in main: {e}")
        raise
