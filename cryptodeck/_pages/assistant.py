"""assistant.py

Chat pass-through to the market assistant. Messages are only kept in the
browser session; the reply text is shown as the back-end sends it.
"""

from __future__ import annotations

import streamlit as st

from cryptodeck.services.api import ApiError, chat
from ._helpers import auth_token

HISTORY_KEY = "chat_history"


def render() -> None:
    st.title("Assistant")
    history: list[tuple[str, str]] = st.session_state.setdefault(HISTORY_KEY, [])

    for role, text in history:
        with st.chat_message(role):
            st.markdown(text)

    prompt = st.chat_input("Ask about the market…")
    if not prompt or not prompt.strip():
        return

    history.append(("user", prompt))
    with st.chat_message("user"):
        st.markdown(prompt)

    with st.chat_message("assistant"):
        with st.spinner("Thinking…"):
            try:
                reply = chat(auth_token(), prompt)
            except ApiError as exc:
                st.error(f"Chat request failed: {exc}")
                return
        st.markdown(reply)
    history.append(("assistant", reply))
