import logging
from pathlib import Path
from questionnaire_export.utils.debugging import debug_export
from questionnaire_export.utils.logging import setup_logger
from questionnaire_export.utils.validation import ValidationLevel


if __name__ == "__main__":
    # Replace with path to a form saved by the designer
    form_path = Path("tests/test_data/patient_intake.json")
    output_dir = Path("debug_output")
    written, validator = debug_export(form_path, output_dir, validation_level=ValidationLevel.LENIENT, logging_level=logging.INFO)

    logger = setup_logger("try_export")
    if validator.results:
        logger.warning(f"{len(validator.results)} validation issues, see {output_dir / 'validation_reports'}")

    print('reached end of code')
