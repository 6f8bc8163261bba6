import uuid
from dataclasses import dataclass

RUN_ID_LENGTH = 13


def new_run_id() -> str:
    """Short random token, e.g. '3f2a9c1e-4b7d'."""
    return str(uuid.uuid4())[:RUN_ID_LENGTH]


@dataclass(frozen=True)
class RunNames:
    """Remote resource names for one run, all derived from the run id."""
    run_id: str

    @classmethod
    def generate(cls) -> "RunNames":
        return cls(run_id=new_run_id())

    @property
    def transform(self) -> str:
        return f"transform-{self.run_id}"

    @property
    def job(self) -> str:
        return f"job-{self.run_id}"

    @property
    def input_asset(self) -> str:
        return f"input-{self.run_id}"

    @property
    def output_asset(self) -> str:
        return f"output-{self.run_id}"

    def all(self) -> tuple[str, str, str, str]:
        return (self.transform, self.job, self.input_asset, self.output_asset)
