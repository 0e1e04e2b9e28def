import streamlit as st

from apps.ui.api_client import ApiClient, ApiError
from apps.ui.session import LoginPrompt
from core.config import settings
from core.logging import configure_logging, logger

configure_logging()
st.set_page_config(page_title="Accounts", layout="centered")

api = ApiClient()

prompt: LoginPrompt = st.session_state.get("admin_prompt")
if prompt is None:
    prompt = LoginPrompt(tenant=settings.SUPER_ADMIN_NAME, display_name=settings.SUPER_ADMIN_NAME)
    st.session_state.admin_prompt = prompt

if not prompt.authenticated:
    st.title("🔒 帳號管理")
    with st.form("login"):
        password = st.text_input("超級管理員密碼", type="password", value=prompt.password_input)
        if st.form_submit_button("登入"):
            prompt.password_input = password
            if prompt.submit(api):
                st.rerun()
    if prompt.error:
        st.error(prompt.error)
    st.stop()

st.title("帳號管理")

with st.form("create", clear_on_submit=True):
    name = st.text_input("帳號 (網址用英文代號)")
    display_name = st.text_input("顯示名稱")
    code = st.text_input("密碼", type="password")
    if st.form_submit_button("➕ 新增帳號"):
        try:
            api.create_account(
                prompt.token, {"name": name, "code": code, "display_name": display_name or None}
            )
        except ApiError as e:
            logger.error("creating account %s failed: %s", name, e)
            st.error(f"新增失敗：{e.detail}")
        else:
            st.success(f"已新增 {name}")

try:
    accounts = api.list_accounts(prompt.token)
except ApiError as e:
    logger.error("listing accounts failed: %s", e)
    st.error("讀取帳號失敗")
    accounts = []

for acc in accounts:
    cols = st.columns([3, 3, 2])
    cols[0].write(acc["name"])
    cols[1].write(acc["display_name"])
    if acc["name"] == settings.SUPER_ADMIN_NAME:
        cols[2].write("-")
        continue
    with cols[2].popover("刪除"):
        st.write(f"確定要刪除帳號「{acc['name']}」嗎？")
        if st.button("確定刪除", key=f"del_{acc['id']}"):
            try:
                api.delete_account(prompt.token, acc["id"])
            except ApiError as e:
                logger.error("deleting account %s failed: %s", acc["name"], e)
                st.error("刪除失敗")
            else:
                st.rerun()
