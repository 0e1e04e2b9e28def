import streamlit as st

from apps.ui.api_client import ApiClient, ApiError
from apps.ui.session import LoginPrompt
from core.logging import configure_logging, logger
from domain.value_objects import SortState
from services.listing.sort_engine import sort_applications

configure_logging()
st.set_page_config(page_title="Applications", layout="wide")

api = ApiClient()
target = st.query_params.get("target", "admin")

COLUMNS = [
    ("applicant", "申請人"),
    ("phone", "電話"),
    ("vendor_name", "供應商"),
    ("vendor_rep", "負責人"),
    ("contact_person", "聯絡人"),
    ("workers", "人數"),
    ("createdAt", "填表時間"),
]

prompt: LoginPrompt = st.session_state.get("prompt")
if prompt is None or prompt.tenant != target:
    prompt = LoginPrompt(tenant=target, display_name=target)
    try:
        prompt.display_name = api.tenant_prompt(target)["ownerName"]
    except ApiError as e:
        logger.info("no display name for %s: %s", target, e)
    st.session_state.prompt = prompt
    for stale in ("applications", "csv_export", "excel"):
        st.session_state.pop(stale, None)


def load() -> None:
    st.session_state.pop("csv_export", None)
    try:
        st.session_state.applications = api.list_applications(prompt.token)
    except ApiError as e:
        logger.error("loading applications failed: %s", e)
        st.error("讀取資料失敗")
        st.session_state.applications = []


def excel_cell(cell, app: dict) -> None:
    """Workbook is built on request and kept for the rest of the session."""
    built = st.session_state.setdefault("excel", {})
    if app["id"] not in built and cell.button("產生 Excel", key=f"make_xlsx_{app['id']}"):
        try:
            built[app["id"]] = api.export_excel(app)
        except ApiError as e:
            logger.error("excel export failed for %s: %s", app["id"], e)
            cell.error("產出 Excel 失敗")
            return
    if app["id"] in built:
        name, data = built[app["id"]]
        cell.download_button("下載 Excel", data, file_name=name, key=f"xlsx_{app['id']}")


if not prompt.authenticated:
    st.title(f"🔒 {prompt.display_name} 的管理後台")
    with st.form("login"):
        password = st.text_input("密碼", type="password", value=prompt.password_input)
        if st.form_submit_button("登入"):
            prompt.password_input = password
            if prompt.submit(api):
                st.rerun()
    if prompt.error:
        st.error(prompt.error)
    st.stop()

if "applications" not in st.session_state:
    load()
state: SortState = st.session_state.setdefault("sort", SortState())

st.title(f"Applications - {prompt.display_name}")

# toolbar
left, mid, right = st.columns(3)
with left:
    if st.button("📥 匯出備份 CSV", key="export_csv"):
        try:
            st.session_state.csv_export = api.export_csv(prompt.token, state.key, state.direction)
        except ApiError as e:
            logger.error("csv export failed: %s", e)
            st.error("匯出失敗")
    if "csv_export" in st.session_state:
        name, data = st.session_state.csv_export
        st.download_button("💾 下載 CSV", data, file_name=name, mime="text/csv")
with mid:
    upload = st.file_uploader("📤 匯入 CSV (新增，不覆蓋)", type=["csv"])
    sure = st.checkbox("確定要開始還原嗎？匯入會新增資料，重複匯入會產生重複資料。")
    if upload is not None and st.button("開始匯入", disabled=not sure):
        try:
            report = api.import_csv(prompt.token, upload.name, upload.getvalue())
        except ApiError as e:
            logger.error("csv import failed: %s", e)
            st.error("❌ 匯入失敗，請檢查 CSV 格式是否正確")
        else:
            st.success(f"✅ 還原 {report['groups']} 筆申請單：{report['message']}")
            load()
with right:
    if st.button("🔄 重新整理"):
        load()

# sort header; re-sorting never refetches
header = st.columns(len(COLUMNS) + 2)
for col, (key, label) in zip(header, COLUMNS):
    arrow = ""
    if state.key == key:
        arrow = " ▲" if state.direction == "asc" else " ▼"
    if col.button(label + arrow, key=f"sort_{key}"):
        st.session_state.sort = state.toggle(key)
        st.session_state.pop("csv_export", None)
        st.rerun()

rows = sort_applications(st.session_state.applications, state)
if not rows:
    st.info("目前沒有資料")

for app in rows:
    cells = st.columns(len(COLUMNS) + 2)
    for cell, (key, _) in zip(cells, COLUMNS):
        value = app.get(key)
        cell.write(len(value or []) if key == "workers" else (value or ""))
    excel_cell(cells[-2], app)
    with cells[-1].popover("刪除"):
        st.write("確定要永久刪除這筆資料嗎？(無法復原)")
        if st.button("確定刪除", key=f"del_{app['id']}"):
            try:
                api.delete_application(prompt.token, app["id"])
            except ApiError as e:
                logger.error("delete failed for %s: %s", app["id"], e)
                st.error("刪除失敗")
            else:
                st.session_state.applications = [
                    a for a in st.session_state.applications if a["id"] != app["id"]
                ]
                st.rerun()
