import streamlit as st

from utils.api_client import error_message, get
from utils.validation import clean_identifier

st.set_page_config(page_title="Search Patient", layout="wide")

st.title("Search Patient")
identifier = st.text_input("Aadhaar number")

if st.button("Search") and identifier:
    cleaned = clean_identifier(identifier)
    if len(cleaned) != 12:
        st.error("Aadhaar number must be exactly 12 digits")
        st.stop()

    resp = get(f"/patient/{cleaned}")
    if resp.status_code == 404:
        st.info("No patient found with this Aadhaar number")
    elif resp.status_code != 200:
        st.error(f"Search failed: {error_message(resp)}")
    else:
        patient = resp.json()["data"]
        st.subheader(patient["name"])
        cols = st.columns(3)
        cols[0].write(f"**Aadhaar:** {patient['identifier']}")
        cols[1].write(f"**Age:** {patient.get('age') or '-'}")
        cols[2].write(f"**Gender:** {patient.get('gender') or '-'}")
        cols = st.columns(3)
        cols[0].write(f"**Phone:** {patient.get('phone') or '-'}")
        cols[1].write(f"**Address:** {patient.get('address') or '-'}")
        cols[2].write(f"**Registered:** {patient.get('created_at') or '-'}")

        st.markdown(f"**Departments visited ({patient['visit_count']}):**")
        for department in patient["departments_visited"]:
            st.write(f"- {department}")
