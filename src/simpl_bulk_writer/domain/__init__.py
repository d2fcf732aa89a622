"""Domain public API."""

from simpl_bulk_writer.domain.errors import (
    ColumnMissingNameOrTypeError,
    ConfigurationError,
    DirectoryNotEmptyError,
    DirtyRecordError,
    DirtyRecordLimitExceededError,
    EmptyColumnListError,
    EncoderError,
    FileWriterError,
    IdentifierNamespaceExhaustedError,
    InvalidCompressionError,
    InvalidDefaultFileSystemError,
    InvalidDelimiterError,
    InvalidEncodingError,
    InvalidFileFormatError,
    InvalidLocationError,
    InvalidWriteModeError,
    MissingRequiredKeyError,
    OutputCreationError,
    PartialDeleteError,
    PartitioningError,
    ReconciliationError,
    TargetNotADirectoryError,
    TaskIOError,
    UnsupportedColumnTypeError,
    UnsupportedFileSystemError,
)
from simpl_bulk_writer.domain.job_models import (
    ALLOWED_COMPRESSIONS,
    ColumnSpec,
    ColumnType,
    Compression,
    FileFormat,
    JobConfig,
    TaskConfig,
    WriteMode,
)
from simpl_bulk_writer.domain.ports import (
    DirtyRecordCollector,
    EncoderFactory,
    FileSystemFacade,
    FileSystemFactory,
    RecordEncoder,
    WritableSink,
    WriterJobLifecycle,
    WriterTaskLifecycle,
)
from simpl_bulk_writer.domain.task_models import (
    DirtyRecord,
    Record,
    RecordStream,
    TaskResult,
    TaskState,
)

__all__ = [
    "ALLOWED_COMPRESSIONS",
    "ColumnMissingNameOrTypeError",
    "ColumnSpec",
    "ColumnType",
    "Compression",
    "ConfigurationError",
    "DirectoryNotEmptyError",
    "DirtyRecord",
    "DirtyRecordCollector",
    "DirtyRecordError",
    "DirtyRecordLimitExceededError",
    "EmptyColumnListError",
    "EncoderError",
    "EncoderFactory",
    "FileFormat",
    "FileSystemFacade",
    "FileSystemFactory",
    "FileWriterError",
    "IdentifierNamespaceExhaustedError",
    "InvalidCompressionError",
    "InvalidDefaultFileSystemError",
    "InvalidDelimiterError",
    "InvalidEncodingError",
    "InvalidFileFormatError",
    "InvalidLocationError",
    "InvalidWriteModeError",
    "JobConfig",
    "MissingRequiredKeyError",
    "OutputCreationError",
    "PartialDeleteError",
    "PartitioningError",
    "Record",
    "RecordEncoder",
    "RecordStream",
    "ReconciliationError",
    "TargetNotADirectoryError",
    "TaskConfig",
    "TaskIOError",
    "TaskResult",
    "TaskState",
    "UnsupportedColumnTypeError",
    "UnsupportedFileSystemError",
    "WritableSink",
    "WriteMode",
    "WriterJobLifecycle",
    "WriterTaskLifecycle",
]
