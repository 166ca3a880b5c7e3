"""
Project Wizard
==============
The new-project form as an explicit state machine.

Steps are tagged values with an ``applicable`` predicate; the pure
``transition`` function moves between applicable steps only, so the
data & files step is skipped the same way in both directions.
"""

import logging
from enum import Enum, IntEnum

from . import validation
from .capabilities import Capabilities, fetch_platforms
from .exceptions import PlatformLoadError, SubmissionError
from .form_data import ProjectFormData
from .submission import submit_project

logger = logging.getLogger(__name__)


class WizardStep(IntEnum):
    BASIC_INFO = 1
    SHOPIFY_SETUP = 2
    DATA_AND_FILES = 3
    REVIEW = 4

    def applicable(self, capabilities):
        if self is WizardStep.DATA_AND_FILES:
            return capabilities.requires_files or capabilities.requires_api
        return True


class Direction(str, Enum):
    NEXT = 'next'
    PREV = 'prev'
    VALIDATE = 'validate'


def transition(step, direction, capabilities):
    """
    The step reached from ``step`` moving in ``direction``.

    Non-applicable steps are skipped; the first and last steps are sticky.
    ``validate`` never moves.
    """
    step = WizardStep(step)
    direction = Direction(direction)
    if direction is Direction.VALIDATE:
        return step

    ordered = list(WizardStep)
    if direction is Direction.PREV:
        ordered.reverse()

    for candidate in ordered[ordered.index(step) + 1:]:
        if candidate.applicable(capabilities):
            return candidate
    return step


class ProjectForm:
    """
    Wizard state for one new project.

    Usage:
        form = ProjectForm()
        form.load_platforms()
        form.select_platform('shopify-csv')
        form.update(domain='example.com')
        form.next_step()
        ...
        project_id = form.submit(context)
    """

    def __init__(self, platforms=None):
        self.step = WizardStep.BASIC_INFO
        self.form_data = ProjectFormData()
        self.files = []
        self.additional_files = []
        self.errors = {}
        self.platforms = list(platforms) if platforms is not None else []
        self.selected_platform = ''
        self.loading = False

    @property
    def platform(self):
        for platform in self.platforms:
            if platform.pk == self.selected_platform:
                return platform
        return None

    @property
    def capabilities(self):
        return Capabilities.for_platform(self.platform)

    def load_platforms(self):
        try:
            self.platforms = fetch_platforms()
        except PlatformLoadError as exc:
            self.platforms = []
            self.errors = {'general': exc.message}
        return self.platforms

    def select_platform(self, platform_id):
        """Choosing another platform throws away everything tied to the old one."""
        self.selected_platform = platform_id or ''
        self.form_data.source_platform = self.selected_platform
        self.form_data.api = {}
        self.files = []
        self.errors = {}

    def update(self, **fields):
        if 'source_platform' in fields:
            self.select_platform(fields.pop('source_platform'))
        for name, value in fields.items():
            if not hasattr(self.form_data, name):
                raise TypeError(f"Unknown form field: {name}")
            setattr(self.form_data, name, value)

    def _errors_for(self, step):
        errors = validation.validate_step(step, self.form_data, self.files, self.platform)
        if (
            step == WizardStep.BASIC_INFO
            and 'source_platform' not in errors
            and self.platforms
            and self.platform is None
        ):
            errors['source_platform'] = 'Please select a valid source platform'
        return errors

    def validate_step(self, step=None):
        step = WizardStep(step if step is not None else self.step)
        self.errors = self._errors_for(step)
        return not self.errors

    def validate_all(self):
        """Validate every step that applies to the selected platform."""
        errors = {}
        capabilities = self.capabilities
        for step in WizardStep:
            if step.applicable(capabilities):
                errors.update(self._errors_for(step))
        self.errors = errors
        return not errors

    def next_step(self):
        if self.validate_step(self.step):
            self.step = transition(self.step, Direction.NEXT, self.capabilities)
        return self.step

    def prev_step(self):
        self.step = transition(self.step, Direction.PREV, self.capabilities)
        return self.step

    def go_to(self, step):
        self.step = WizardStep(step)
        return self.step

    def apply(self, direction):
        """Run one navigation request; returns the resulting step."""
        direction = Direction(direction)
        if direction is Direction.NEXT:
            return self.next_step()
        if direction is Direction.PREV:
            return self.prev_step()
        self.validate_step(self.step)
        return self.step

    def submit(self, context):
        """Create the project and upload its files. Returns the new project id."""
        if self.loading:
            raise SubmissionError('Submission already in progress')

        self.loading = True
        self.errors = {}
        try:
            return submit_project(context, self.form_data, self.files, self.additional_files)
        finally:
            self.loading = False
