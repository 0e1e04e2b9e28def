import uuid

import streamlit as st

from apps.ui.api_client import ApiClient, ApiError
from core.logging import configure_logging, logger

configure_logging()
st.set_page_config(page_title="供應商工安認證申請表", layout="centered")

BASIC_FIELDS = [
    ("applicant", "申請人", "請輸入大名"),
    ("phone", "連絡電話", "09xx-xxx-xxx"),
    ("vendor_name", "供應商名稱", "公司名稱"),
    ("vendor_rep", "供應商負責人", "負責人姓名"),
    ("contact_person", "現場聯絡人", "現場找誰？"),
]
WORKER_FIELDS = [("name", "姓名"), ("idNumber", "身分證"), ("bloodType", "血型"), ("birthday", "生日")]


def worker_key(uid: str, field: str) -> str:
    return f"w_{uid}_{field}"


def add_worker() -> None:
    st.session_state.worker_ids.append(uuid.uuid4().hex)


def remove_worker(uid: str) -> None:
    st.session_state.worker_ids.remove(uid)
    for field, _ in WORKER_FIELDS:
        st.session_state.pop(worker_key(uid, field), None)


def reset_form() -> None:
    for key, _, _ in BASIC_FIELDS:
        st.session_state.pop(key, None)
    for uid in list(st.session_state.worker_ids):
        remove_worker(uid)
    add_worker()
    st.session_state.confirm = False


def submit(api: ApiClient, owner_id: str) -> None:
    payload = {key: st.session_state.get(key, "") for key, _, _ in BASIC_FIELDS}
    payload["workers"] = [
        {field: st.session_state.get(worker_key(uid, field), "") for field, _ in WORKER_FIELDS}
        for uid in st.session_state.worker_ids
    ]
    try:
        api.submit(owner_id, payload)
    except ApiError as e:
        logger.error("submission failed: %s", e)
        st.session_state.flash = ("error", "❌ 發生錯誤，請稍後再試。")
    else:
        reset_form()
        st.session_state.flash = ("success", "✅ 申請成功！資料已送出。")


api = ApiClient()
owner_id = st.query_params.get("admin", "unknown")

try:
    target = api.form_target(owner_id)
except ApiError as e:
    logger.error("form target lookup failed: %s", e)
    target = {"ownerId": owner_id, "ownerName": owner_id}

st.title("供應商工安認證申請表")
st.caption(f"提交給管理者：{target['ownerName']}")

if "worker_ids" not in st.session_state:
    st.session_state.worker_ids = []
    add_worker()

st.subheader("📋 基本資訊")
for key, label, placeholder in BASIC_FIELDS:
    st.text_input(label, placeholder=placeholder, key=key)

st.subheader("👷 進場夥伴名單")
removable = len(st.session_state.worker_ids) > 1
for uid in st.session_state.worker_ids:
    cols = st.columns([3, 3, 1, 2, 1])
    for col, (field, label) in zip(cols, WORKER_FIELDS):
        col.text_input(label, key=worker_key(uid, field))
    if removable:
        cols[4].button("🗑️", key=worker_key(uid, "remove"), on_click=remove_worker, args=(uid,))

st.button("➕ 新增一位", key="add_worker", on_click=add_worker)

confirmed = st.checkbox(f"確定要送出申請給管理者「{target['ownerName']}」", key="confirm")
st.button(
    "確認送出資料 📨",
    key="submit",
    disabled=not confirmed,
    on_click=submit,
    args=(api, owner_id),
)

kind, message = st.session_state.pop("flash", (None, None))
if kind == "success":
    st.success(message)
elif kind == "error":
    st.error(message)
