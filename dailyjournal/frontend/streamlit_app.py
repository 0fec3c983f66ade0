import altair as alt
import pandas as pd
import requests
import streamlit as st

st.set_page_config(page_title="Daily Journal", page_icon="📓", layout="centered")

API_BASE = st.text_input("API base URL", value="http://127.0.0.1:8000")

MOOD_EMOJI = {
    "happy": "😊",
    "sad": "😔",
    "anxious": "😰",
    "crisis": "😢",
    "neutral": "😐",
}
MOOD_COLORS = {
    "happy": "#22c55e",
    "sad": "#3b82f6",
    "anxious": "#eab308",
    "crisis": "#ef4444",
    "neutral": "#d1d5db",
}

if "token" not in st.session_state:
    st.session_state.token = None
if "last_entry" not in st.session_state:
    st.session_state.last_entry = None


def api_headers() -> dict:
    if st.session_state.token:
        return {"Authorization": f"Bearer {st.session_state.token}"}
    return {}


def api_url(path: str) -> str:
    return f"{API_BASE}{path}"


def safe_json(resp: requests.Response):
    content_type = resp.headers.get("content-type", "")
    if "application/json" not in content_type:
        return None
    try:
        return resp.json()
    except ValueError:
        return None


def show_response_error(resp: requests.Response, path: str, fallback_message: str) -> None:
    payload = safe_json(resp)
    if payload and isinstance(payload, dict):
        detail = payload.get("detail", fallback_message)
        st.error(f"{fallback_message} ({resp.status_code}) | {api_url(path)} | {detail}")
        return
    text = (resp.text or "").strip()
    snippet = text[:500] if text else "No response body."
    st.error(f"{fallback_message} ({resp.status_code}) | {api_url(path)} | {snippet}")


def api_get(path: str):
    try:
        return requests.get(api_url(path), headers=api_headers(), timeout=10)
    except requests.RequestException as exc:
        st.error(f"Request failed: {exc}")
        return None


def api_post(path: str, json=None, data=None):
    try:
        return requests.post(
            api_url(path),
            headers=api_headers(),
            json=json,
            data=data,
            timeout=10,
        )
    except requests.RequestException as exc:
        st.error(f"Request failed: {exc}")
        return None


def render_quote(entry: dict) -> None:
    quote = entry.get("quote")
    if not quote:
        st.caption("No quote for this entry.")
        return
    if entry.get("is_quote_revealed"):
        author = quote.get("author") or "Unknown"
        st.info(f"“{quote['text']}” — {author}")
        return
    if st.button("Reveal your quote", key=f"reveal_{entry['id']}"):
        resp = api_post(f"/journal/entries/{entry['id']}/reveal-quote")
        if resp is not None and resp.ok:
            entry["is_quote_revealed"] = True
            st.rerun()
        elif resp is not None:
            show_response_error(resp, "/journal/entries/{id}/reveal-quote", "Could not reveal quote.")


def show_crisis_support() -> None:
    st.error(
        "It sounds like you are going through something really hard. "
        "Your trusted contact has been notified. If you feel unsafe, contact local emergency "
        "services, or in the U.S. call or text 988."
    )


st.title("Daily Journal")
st.caption("Write it down, notice your patterns. Not a substitute for professional care.")

health_resp = api_get("/health")
if health_resp is None:
    st.error("Backend check failed. Start backend with: uvicorn dailyjournal.backend.app.main:app --reload --port 8000")
elif not health_resp.ok:
    show_response_error(health_resp, "/health", "Backend unhealthy.")

account_tab, journal_tab, mood_tab, profile_tab = st.tabs(["Account", "Journal", "Mood Tracker", "Profile"])

with account_tab:
    if st.session_state.token:
        me_resp = api_get("/auth/me")
        if me_resp is not None and me_resp.ok:
            me = safe_json(me_resp) or {}
            st.success(f"Signed in as {me.get('email')}")
        if st.button("Log out"):
            api_post("/auth/logout")
            st.session_state.token = None
            st.session_state.last_entry = None
            st.rerun()
    else:
        st.subheader("Sign up")
        with st.form("signup_form"):
            signup_email = st.text_input("Email", key="signup_email")
            signup_password = st.text_input("Password", type="password", key="signup_password")
            signup_trusted = st.text_input(
                "Trusted contact email",
                key="signup_trusted",
                help="We email this person if an entry suggests you may be in crisis.",
            )
            if st.form_submit_button("Create account"):
                if not signup_email or not signup_password or not signup_trusted:
                    st.warning("Fill in every field.")
                else:
                    resp = api_post(
                        "/auth/signup",
                        json={"email": signup_email, "password": signup_password, "trusted_email": signup_trusted},
                    )
                    if resp is not None and resp.ok:
                        st.session_state.token = (safe_json(resp) or {}).get("access_token")
                        st.success("Account created. You are signed in.")
                    elif resp is not None:
                        show_response_error(resp, "/auth/signup", "Sign up failed.")

        st.subheader("Login")
        with st.form("login_form"):
            login_email = st.text_input("Email", key="login_email")
            login_password = st.text_input("Password", type="password", key="login_password")
            if st.form_submit_button("Sign in"):
                if not login_email or not login_password:
                    st.warning("Enter your email and password.")
                else:
                    resp = api_post("/auth/login", data={"username": login_email, "password": login_password})
                    if resp is not None and resp.ok:
                        st.session_state.token = (safe_json(resp) or {}).get("access_token")
                        st.success("Signed in.")
                    elif resp is not None:
                        show_response_error(resp, "/auth/login", "Login failed.")

with journal_tab:
    if not st.session_state.token:
        st.warning("Sign in on the Account tab to continue.")
    else:
        st.subheader("How are you feeling today?")
        with st.form("journal_form", clear_on_submit=True):
            content = st.text_area("Journal entry", height=200)
            if st.form_submit_button("Save entry"):
                if not content.strip():
                    st.warning("Write something before saving.")
                else:
                    resp = api_post("/journal/entries", json={"content": content})
                    if resp is not None and resp.ok:
                        st.session_state.last_entry = safe_json(resp)
                    elif resp is not None:
                        show_response_error(resp, "/journal/entries", "Unable to save entry.")

        entry = st.session_state.last_entry
        if entry:
            mood = entry.get("detected_mood", "neutral")
            st.markdown(f"**Detected mood:** {MOOD_EMOJI.get(mood, '😐')} {mood}")
            if entry.get("is_crisis"):
                show_crisis_support()
            render_quote(entry)

        st.subheader("Past entries")
        list_resp = api_get("/journal/entries")
        if list_resp is not None and list_resp.ok:
            entries = safe_json(list_resp) or []
            if not entries:
                st.info("No entries yet.")
            for item in entries:
                mood = item.get("detected_mood", "neutral")
                with st.expander(f"{item['created_at'][:16].replace('T', ' ')} · {MOOD_EMOJI.get(mood, '😐')} {mood}"):
                    st.write(item["content"])
                    if item.get("is_quote_revealed") and item.get("quote"):
                        st.caption(f"“{item['quote']['text']}” — {item['quote'].get('author') or 'Unknown'}")
        elif list_resp is not None:
            show_response_error(list_resp, "/journal/entries", "Unable to load entries.")

with mood_tab:
    if not st.session_state.token:
        st.warning("Sign in on the Account tab to continue.")
    else:
        st.subheader("This week")
        weekly_resp = api_get("/mood/weekly")
        if weekly_resp is not None and weekly_resp.ok:
            weekly = safe_json(weekly_resp) or []
            weekly_df = pd.DataFrame(weekly)
            if weekly_df.empty:
                st.info("No mood data yet.")
            else:
                weekly_df["date"] = pd.to_datetime(weekly_df["date"])
                weekly_df["day"] = weekly_df["date"].dt.strftime("%a")
                chart = alt.Chart(weekly_df).mark_bar().encode(
                    x=alt.X("day:N", sort=None, title="Day"),
                    y=alt.Y("entries:Q", title="Entries"),
                    color=alt.Color(
                        "mood:N",
                        scale=alt.Scale(domain=list(MOOD_COLORS), range=list(MOOD_COLORS.values())),
                        title="Dominant mood",
                    ),
                    tooltip=["date:T", "mood:N", "entries:Q"],
                )
                st.altair_chart(chart, use_container_width=True)
                columns = st.columns(7)
                for column, point in zip(columns, weekly):
                    column.metric(pd.to_datetime(point["date"]).strftime("%a"), MOOD_EMOJI.get(point["mood"], "😐"))
                st.caption(f"{int(weekly_df['entries'].sum())} entries in the last 7 days.")
        elif weekly_resp is not None:
            show_response_error(weekly_resp, "/mood/weekly", "Unable to load mood data.")

with profile_tab:
    if not st.session_state.token:
        st.warning("Sign in on the Account tab to continue.")
    else:
        st.subheader("Change password")
        with st.form("password_form", clear_on_submit=True):
            current_password = st.text_input("Current password", type="password")
            new_password = st.text_input("New password (min 8 characters)", type="password")
            if st.form_submit_button("Update password"):
                resp = api_post(
                    "/profile/change-password",
                    json={"current_password": current_password, "new_password": new_password},
                )
                if resp is not None and resp.ok:
                    st.success("Password updated.")
                elif resp is not None:
                    show_response_error(resp, "/profile/change-password", "Password update failed.")

        st.subheader("Trusted contact")
        with st.form("trusted_form"):
            trusted_email = st.text_input("Trusted contact email")
            if st.form_submit_button("Save trusted contact"):
                resp = api_post("/profile/update-trusted-email", json={"trusted_email": trusted_email})
                if resp is not None and resp.ok:
                    st.success("Trusted contact updated.")
                elif resp is not None:
                    show_response_error(resp, "/profile/update-trusted-email", "Update failed.")
