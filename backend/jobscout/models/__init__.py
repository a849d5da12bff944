from jobscout.models.organization import Organization
from jobscout.models.job import Job

__all__ = ["Organization", "Job"]
