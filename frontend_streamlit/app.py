import streamlit as st
from utils.api_client import get

st.set_page_config(page_title="Hospital Visit Tracker", layout="wide")

st.sidebar.title("Navigation")
st.sidebar.info("Use the pages in the sidebar")

st.title("Hospital Visit Tracker")
st.write(
    "Track patient visits across departments. Each patient is identified by a "
    "12-digit Aadhaar number; repeat visits add the department to their history."
)

resp = get("/stats")
if resp.status_code == 200:
    stats = resp.json().get("stats", {})
    st.metric("Total patients", stats.get("totalPatients", 0))
else:
    st.warning("Unable to load statistics")

st.markdown(
    """
- **Upload Records**: import daily visit records from CSV or TXT files
- **Manual Entry**: record visits one at a time or as a batch
- **Search**: look up a patient by Aadhaar number
- **Patients**: list, sort and export patient records
"""
)
