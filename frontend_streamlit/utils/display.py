import pandas as pd


def patients_frame(patients: list[dict]) -> pd.DataFrame:
    rows = [
        {
            "Aadhaar No": p["identifier"],
            "Name": p["name"],
            "Age": p.get("age"),
            "Gender": p.get("gender"),
            "Phone": p.get("phone"),
            "Departments Visited": ", ".join(p.get("departments_visited", [])),
            "Visits": p.get("visit_count", 0),
            "Registered": p.get("created_at"),
        }
        for p in patients
    ]
    return pd.DataFrame(rows)
