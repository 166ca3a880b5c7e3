"""
Project Exceptions
==================
Errors raised by the submission workflow. Their messages are shown to the
user as-is.
"""


class ProjectError(Exception):
    """Base class for project workflow errors"""
    default_message = 'Something went wrong'

    def __init__(self, message=None):
        self.message = message or self.default_message
        super().__init__(self.message)


class PlatformLoadError(ProjectError):
    default_message = 'Failed to load platforms'


class SubmissionError(ProjectError):
    """The project row could not be created; carries the backend message."""
    default_message = 'Failed to create project'


class FileUploadError(ProjectError):
    default_message = 'Failed to upload files. Please try again.'
