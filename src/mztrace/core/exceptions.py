"""mztrace core exceptions."""


class DataHandleNotFound(ValueError):
    """Exception raised when a data handle is not found in a data point store."""


class EmptyInputError(ValueError):
    """Exception raised when a chromatogram builder receives an empty scan sequence."""


class RegistryError(ValueError):
    """Exception raised when an entry is not found in a registry."""


class RepeatedIdError(ValueError):
    """Exception raised when trying to add a resource with an existing id."""


class UnorderedScansError(ValueError):
    """Exception raised when scans are not sorted by retention time.

    :param scan_index: the index of the first scan with a retention time lower than the previous scan.
    """

    def __init__(self, scan_index: int, msg: str | None = None):
        if msg is None:
            msg = (
                f"Retention time of scan #{scan_index} is smaller than the retention time of the previous scan. "
                "Only scans with non-decreasing retention times are accepted."
            )
        super().__init__(msg)
        self.scan_index = scan_index
