from pydantic import BaseModel
from typing import Dict, List, Union

class Report(BaseModel):
    doctor_count: int
    patient_count: int
    appointment_count: int

    def rows(self) -> List[Dict[str, Union[str, int]]]:
        """Flatten into metric/value rows for export."""
        return [
            {"metric": "TotalDoctors", "value": self.doctor_count},
            {"metric": "TotalPatients", "value": self.patient_count},
            {"metric": "TotalAppointments", "value": self.appointment_count},
        ]
