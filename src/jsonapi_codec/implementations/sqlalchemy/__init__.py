from .core import SQLARecordDescriptor, column_annotation, register_mapped_class  # noqa
