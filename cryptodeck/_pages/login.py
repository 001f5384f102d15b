"""login.py

Login / registration page. On success the token is stored in
``st.session_state`` and handed explicitly to every authorised call.
"""

from __future__ import annotations

import streamlit as st

from cryptodeck.services.api import ApiError, login, register
from ._helpers import flash, refresh_market_data, set_auth_token


def render() -> None:
    st.title("Welcome")
    tab_login, tab_register = st.tabs(["Login", "Register"])

    with tab_login:
        with st.form("login_form"):
            email = st.text_input("Email")
            password = st.text_input("Password", type="password")
            submitted = st.form_submit_button("Login")
        if submitted:
            try:
                token = login(email.strip(), password)
            except ApiError as exc:
                st.error(f"Login failed: {exc}")
            else:
                set_auth_token(token)
                refresh_market_data(force=True)
                flash("success", "Logged in.")
                st.rerun()

    with tab_register:
        with st.form("register_form"):
            name = st.text_input("First name")
            last_name = st.text_input("Last name")
            email = st.text_input("Email", key="register_email")
            password = st.text_input("Password", type="password", key="register_password")
            submitted = st.form_submit_button("Register")
        if submitted:
            if not all(v.strip() for v in (name, last_name, email, password)):
                st.error("All fields are required.")
                return
            try:
                register(name.strip(), last_name.strip(), email.strip(), password)
            except ApiError as exc:
                st.error(f"Registration failed: {exc}")
            else:
                st.success("Account created – you can log in now.")
