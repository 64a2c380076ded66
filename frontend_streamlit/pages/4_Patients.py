from datetime import date

import streamlit as st

from utils.api_client import attachment_filename, error_message, get
from utils.display import patients_frame

st.set_page_config(page_title="Patients", layout="wide")

st.title("Patients")

VIEWS = {
    "all": "Sort by Aadhaar number",
    "visits": "Sort by visit count",
    "today": "Registered today",
    "daterange": "Registered in date range",
}
ENDPOINTS = {
    "all": "/allPatients",
    "visits": "/patients/sort/by-visits",
    "today": "/patients/today",
    "daterange": "/patients/date-range",
}

view = st.selectbox("Filter / sort", list(VIEWS), format_func=VIEWS.get)

params = {}
if view == "daterange":
    col1, col2 = st.columns(2)
    start = col1.date_input("Start date", value=date.today())
    end = col2.date_input("End date", value=date.today())
    if start > end:
        st.error("Start date must not be after end date")
        st.stop()
    params = {"startDate": start.isoformat(), "endDate": end.isoformat()}

resp = get(ENDPOINTS[view], params=params or None)
if resp.status_code != 200:
    st.error(f"Failed to load patients: {error_message(resp)}")
    st.stop()

patients = resp.json().get("data", [])
st.caption(f"{len(patients)} patients")

if not patients:
    st.info("No patients found")
else:
    st.dataframe(patients_frame(patients), use_container_width=True, hide_index=True)
    export = get("/patients/export", params={"view": view, **params})
    if export.status_code == 200:
        st.download_button(
            "Export CSV",
            data=export.content,
            file_name=attachment_filename(export, "patients_report.csv"),
            mime="text/csv",
        )
    else:
        st.warning("Unable to prepare export")
