import streamlit as st

from utils.api_client import error_message, post_file

st.set_page_config(page_title="Upload Records", layout="wide")

st.title("Upload Records")
st.write("Import daily patient visit data from CSV or TXT files.")

with st.expander("File format guidelines"):
    st.markdown("**CSV** (header row required):")
    st.code(
        "AADHAR_NO,NAME,AGE,GENDER,ADDRESS,PHONE,DEPARTMENT_VISITED\n"
        "123456789012,Ravi Kumar,45,Male,Chennai,9876543210,Cardiology",
        language="text",
    )
    st.markdown("**TXT**: one record per line in the same column order, separated by `|`, tab or comma:")
    st.code("123456789012|Ravi Kumar|45|Male|Chennai|9876543210|Cardiology", language="text")
    st.caption("AADHAR_NO, NAME and DEPARTMENT_VISITED are required.")

upload = st.file_uploader("Visit records file", type=["csv", "txt"])

if st.button("Upload and Process", disabled=upload is None):
    with st.spinner("Processing file..."):
        resp = post_file("/uploadFile", upload)
    if resp.status_code != 200:
        st.error(f"Upload failed: {error_message(resp)}")
    else:
        result = resp.json()
        summary = result.get("summary", {})
        st.success(result.get("message", "File processed"))

        cols = st.columns(5)
        cols[0].metric("Total records", summary.get("totalRecords", 0))
        cols[1].metric("Valid", summary.get("validRecords", 0))
        cols[2].metric("Invalid", summary.get("invalidRecords", 0))
        cols[3].metric("New patients", summary.get("newPatients", 0))
        cols[4].metric("Updated patients", summary.get("updatedPatients", 0))

        if result.get("errors"):
            st.subheader("Invalid lines")
            st.dataframe(result["errors"], use_container_width=True)
        if result.get("processingErrors"):
            st.subheader("Processing errors")
            st.dataframe(result["processingErrors"], use_container_width=True)
