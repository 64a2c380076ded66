import streamlit as st

from utils.api_client import error_message, post
from utils.validation import clean_identifier, form_errors

st.set_page_config(page_title="Manual Entry", layout="wide")

if "pending_visits" not in st.session_state:
    st.session_state["pending_visits"] = []

st.title("Manual Entry")

with st.form("visit_form", clear_on_submit=True):
    col1, col2 = st.columns(2)
    identifier = col1.text_input("Aadhaar number *", max_chars=14)
    name = col2.text_input("Name *")
    age = col1.number_input("Age", min_value=0, max_value=150, value=None, step=1)
    gender = col2.selectbox("Gender", ["", "Male", "Female", "Other"])
    phone = col1.text_input("Phone", max_chars=10)
    department = col2.text_input("Department visited *")
    address = st.text_area("Address")

    save_now = st.form_submit_button("Save visit")
    add_to_list = st.form_submit_button("Add to pending list")

if save_now or add_to_list:
    errors = form_errors(identifier, name, department, phone)
    if errors:
        for err in errors:
            st.error(err)
    else:
        visit = {
            "identifier": clean_identifier(identifier),
            "name": name.strip(),
            "age": int(age) if age is not None else None,
            "gender": gender or None,
            "address": address.strip() or None,
            "phone": phone.strip() or None,
            "department": department.strip(),
        }
        if add_to_list:
            st.session_state["pending_visits"].append(visit)
            st.success("Added to pending list")
        else:
            resp = post("/addVisit", visit)
            if resp.status_code in (200, 201):
                body = resp.json()
                st.success(body.get("message", "Saved"))
                st.json(body.get("data", {}))
            else:
                st.error(f"Save failed: {error_message(resp)}")

pending = st.session_state["pending_visits"]
st.subheader(f"Pending visits ({len(pending)})")
if pending:
    st.dataframe(pending, use_container_width=True)
    col1, col2 = st.columns(2)
    if col1.button("Save all"):
        resp = post("/addBulkVisits", {"patients": pending})
        if resp.status_code == 200:
            body = resp.json()
            st.success(body.get("message", "Saved"))
            st.json(body.get("summary", {}))
            if body.get("validationErrors"):
                st.warning("Some records were rejected")
                st.json(body["validationErrors"])
            if body.get("processingErrors"):
                st.warning("Some records could not be saved")
                st.json(body["processingErrors"])
            st.session_state["pending_visits"] = []
        else:
            st.error(f"Bulk save failed: {error_message(resp)}")
    if col2.button("Clear list"):
        st.session_state["pending_visits"] = []
        st.rerun()
else:
    st.info("No pending visits")
