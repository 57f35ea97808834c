"""
Configuration manager for quiz admin settings.
"""
import logging
from typing import Dict, Any, List
from pathlib import Path
import os

from .image_ingestion import ImageSettings
from .localized_text import SUPPORTED_LOCALES
from .models import AdminSettings


class ConfigManager:
    """Manages admin configuration settings with validation."""

    # Default configuration values
    DEFAULT_MAX_IMAGE_DIMENSION = 400
    DEFAULT_JPEG_QUALITY = 0.6
    DEFAULT_SAVED_INDICATOR_SECONDS = 2.0
    DEFAULT_LOCALE = "en"
    DEFAULT_RESULTS_DISPLAY_LIMIT = 20
    DEFAULT_DATA_DIRECTORY = "./data/"

    # Validation limits
    MIN_IMAGE_DIMENSION = 16
    MAX_IMAGE_DIMENSION = 4096
    MAX_SAVED_INDICATOR_SECONDS = 60
    MIN_RESULTS_DISPLAY_LIMIT = 1
    MAX_RESULTS_DISPLAY_LIMIT = 100

    def __init__(self):
        """Initialize ConfigManager with default settings."""
        self.logger = logging.getLogger(__name__)
        self._settings = AdminSettings()
        self._data_directory = self.DEFAULT_DATA_DIRECTORY

    def get_settings(self) -> AdminSettings:
        """
        Get a copy of the current settings.

        Returns:
            AdminSettings object with current configuration
        """
        return AdminSettings(
            max_image_dimension=self._settings.max_image_dimension,
            jpeg_quality=self._settings.jpeg_quality,
            saved_indicator_seconds=self._settings.saved_indicator_seconds,
            default_locale=self._settings.default_locale,
            results_display_limit=self._settings.results_display_limit
        )

    def get_image_settings(self) -> ImageSettings:
        return ImageSettings(
            max_dimension=self._settings.max_image_dimension,
            quality=self._settings.jpeg_quality
        )

    def apply_config(self, admin_config: Dict[str, Any]) -> List[str]:
        """
        Apply the 'admin' section of config.json.

        Invalid values are logged and left at their defaults.

        Args:
            admin_config: Mapping read from the config file

        Returns:
            List of user-facing messages for values that were rejected
        """
        setters = {
            'data_directory': self.set_data_directory,
            'max_image_dimension': self.set_max_image_dimension,
            'jpeg_quality': self.set_jpeg_quality,
            'saved_indicator_seconds': self.set_saved_indicator_seconds,
            'default_locale': self.set_default_locale,
            'results_display_limit': self.set_results_display_limit,
        }
        rejected = []
        for key, value in admin_config.items():
            setter = setters.get(key)
            if setter is None:
                self.logger.warning(f"Ignoring unknown admin setting '{key}'")
                continue
            result = setter(value)
            if not result['success']:
                rejected.append(result['user_message'])
        return rejected

    def set_max_image_dimension(self, dimension: int) -> Dict[str, Any]:
        """
        Set the bounding size for ingested images.

        Args:
            dimension: Largest allowed width or height in pixels

        Returns:
            Dictionary with success status, error message, and user-friendly message
        """
        if isinstance(dimension, bool) or not isinstance(dimension, int):
            error_msg = f"Image dimension must be an integer, got {type(dimension).__name__}"
            self.logger.error(error_msg)
            return {
                'success': False,
                'error': error_msg,
                'user_message': f"❌ Invalid input: Expected a number, got {type(dimension).__name__}"
            }

        if dimension < self.MIN_IMAGE_DIMENSION or dimension > self.MAX_IMAGE_DIMENSION:
            error_msg = (
                f"Image dimension must be between {self.MIN_IMAGE_DIMENSION} "
                f"and {self.MAX_IMAGE_DIMENSION} pixels"
            )
            self.logger.error(error_msg)
            return {
                'success': False,
                'error': error_msg,
                'user_message': f"❌ {error_msg}"
            }

        self._settings.max_image_dimension = dimension
        self.logger.info(f"Max image dimension set to {dimension}px")
        return {
            'success': True,
            'message': f"Max image dimension set to {dimension}px",
            'user_message': f"✅ Images will be scaled to fit {dimension}x{dimension}"
        }

    def set_jpeg_quality(self, quality: float) -> Dict[str, Any]:
        """
        Set the JPEG quality factor used for ingested images.

        Args:
            quality: Quality factor in (0, 1]
        """
        if isinstance(quality, bool) or not isinstance(quality, (int, float)):
            error_msg = f"JPEG quality must be a number, got {type(quality).__name__}"
            self.logger.error(error_msg)
            return {
                'success': False,
                'error': error_msg,
                'user_message': f"❌ Invalid input: Expected a number, got {type(quality).__name__}"
            }

        if not 0 < quality <= 1:
            error_msg = "JPEG quality must be greater than 0 and at most 1"
            self.logger.error(error_msg)
            return {
                'success': False,
                'error': error_msg,
                'user_message': "❌ Quality must be between 0 and 1 (for example 0.6)"
            }

        self._settings.jpeg_quality = float(quality)
        self.logger.info(f"JPEG quality set to {quality}")
        return {
            'success': True,
            'message': f"JPEG quality set to {quality}",
            'user_message': f"✅ Image quality set to {quality}"
        }

    def set_saved_indicator_seconds(self, seconds: float) -> Dict[str, Any]:
        if isinstance(seconds, bool) or not isinstance(seconds, (int, float)):
            error_msg = f"Saved indicator duration must be a number, got {type(seconds).__name__}"
            self.logger.error(error_msg)
            return {
                'success': False,
                'error': error_msg,
                'user_message': f"❌ Invalid input: Expected a number, got {type(seconds).__name__}"
            }

        if seconds < 0 or seconds > self.MAX_SAVED_INDICATOR_SECONDS:
            error_msg = f"Saved indicator duration must be between 0 and {self.MAX_SAVED_INDICATOR_SECONDS} seconds"
            self.logger.error(error_msg)
            return {
                'success': False,
                'error': error_msg,
                'user_message': f"❌ {error_msg}"
            }

        self._settings.saved_indicator_seconds = float(seconds)
        self.logger.info(f"Saved indicator duration set to {seconds}s")
        return {
            'success': True,
            'message': f"Saved indicator duration set to {seconds}s",
            'user_message': f"✅ Save confirmation shown for {seconds} seconds"
        }

    def set_default_locale(self, locale: str) -> Dict[str, Any]:
        if locale not in SUPPORTED_LOCALES:
            error_msg = f"Unsupported locale: {locale!r}"
            self.logger.error(error_msg)
            return {
                'success': False,
                'error': error_msg,
                'user_message': f"❌ Locale must be one of: {', '.join(SUPPORTED_LOCALES)}"
            }

        self._settings.default_locale = locale
        self.logger.info(f"Default locale set to {locale}")
        return {
            'success': True,
            'message': f"Default locale set to {locale}",
            'user_message': f"✅ Default language set to {locale}"
        }

    def set_results_display_limit(self, limit: int) -> Dict[str, Any]:
        if isinstance(limit, bool) or not isinstance(limit, int):
            error_msg = f"Results display limit must be an integer, got {type(limit).__name__}"
            self.logger.error(error_msg)
            return {
                'success': False,
                'error': error_msg,
                'user_message': f"❌ Invalid input: Expected a number, got {type(limit).__name__}"
            }

        if limit < self.MIN_RESULTS_DISPLAY_LIMIT or limit > self.MAX_RESULTS_DISPLAY_LIMIT:
            error_msg = (
                f"Results display limit must be between {self.MIN_RESULTS_DISPLAY_LIMIT} "
                f"and {self.MAX_RESULTS_DISPLAY_LIMIT}"
            )
            self.logger.error(error_msg)
            return {
                'success': False,
                'error': error_msg,
                'user_message': f"❌ {error_msg}"
            }

        self._settings.results_display_limit = limit
        self.logger.info(f"Results display limit set to {limit}")
        return {
            'success': True,
            'message': f"Results display limit set to {limit}",
            'user_message': f"✅ Showing up to {limit} results"
        }

    def set_data_directory(self, directory: str) -> Dict[str, Any]:
        """
        Set the directory holding the store document.

        Args:
            directory: Path to the data directory

        Returns:
            Dictionary with success status, error message, and user-friendly message
        """
        if not isinstance(directory, str):
            error_msg = f"Data directory must be a string, got {type(directory).__name__}"
            self.logger.error(error_msg)
            return {
                'success': False,
                'error': error_msg,
                'user_message': f"❌ Invalid input: Expected a path string, got {type(directory).__name__}"
            }

        if not directory.strip():
            error_msg = "Data directory cannot be empty"
            self.logger.error(error_msg)
            return {
                'success': False,
                'error': error_msg,
                'user_message': "❌ Directory path cannot be empty"
            }

        try:
            normalized_path = str(Path(directory).resolve())
        except (OSError, ValueError) as e:
            error_msg = f"Invalid directory path format: {e}"
            self.logger.error(error_msg)
            return {
                'success': False,
                'error': error_msg,
                'user_message': f"❌ Invalid path format: {directory}"
            }

        system_dirs = ['/bin', '/usr', '/etc', '/sys', '/proc', 'C:\\Windows', 'C:\\Program Files']
        if any(normalized_path.startswith(sys_dir) for sys_dir in system_dirs):
            error_msg = f"Cannot use system directory: {normalized_path}"
            self.logger.error(error_msg)
            return {
                'success': False,
                'error': error_msg,
                'user_message': f"❌ Cannot use system directory: {directory}"
            }

        self._data_directory = normalized_path
        self.logger.info(f"Data directory set to {normalized_path}")
        return {
            'success': True,
            'message': f"Data directory set to {normalized_path}",
            'user_message': f"✅ Data directory set to {normalized_path}"
        }

    def get_data_directory(self) -> str:
        return self._data_directory

    def get_default_locale(self) -> str:
        return self._settings.default_locale

    def get_saved_indicator_seconds(self) -> float:
        return self._settings.saved_indicator_seconds

    def get_results_display_limit(self) -> int:
        return self._settings.results_display_limit

    def reset_to_defaults(self) -> None:
        """Reset all settings to their default values."""
        self._settings = AdminSettings(
            max_image_dimension=self.DEFAULT_MAX_IMAGE_DIMENSION,
            jpeg_quality=self.DEFAULT_JPEG_QUALITY,
            saved_indicator_seconds=self.DEFAULT_SAVED_INDICATOR_SECONDS,
            default_locale=self.DEFAULT_LOCALE,
            results_display_limit=self.DEFAULT_RESULTS_DISPLAY_LIMIT
        )
        self._data_directory = self.DEFAULT_DATA_DIRECTORY
        self.logger.info("All settings reset to default values")

    def validate_settings(self) -> Dict[str, Any]:
        """
        Validate current settings and return validation results.

        Returns:
            Dictionary with validation results and any issues found
        """
        validation_result = {
            "valid": True,
            "issues": []
        }

        dimension = self._settings.max_image_dimension
        if (not isinstance(dimension, int) or
                dimension < self.MIN_IMAGE_DIMENSION or
                dimension > self.MAX_IMAGE_DIMENSION):
            validation_result["valid"] = False
            validation_result["issues"].append(f"Invalid max image dimension: {dimension}")

        quality = self._settings.jpeg_quality
        if not isinstance(quality, (int, float)) or not 0 < quality <= 1:
            validation_result["valid"] = False
            validation_result["issues"].append(f"Invalid JPEG quality: {quality}")

        if self._settings.default_locale not in SUPPORTED_LOCALES:
            validation_result["valid"] = False
            validation_result["issues"].append(f"Invalid default locale: {self._settings.default_locale}")

        limit = self._settings.results_display_limit
        if (not isinstance(limit, int) or
                limit < self.MIN_RESULTS_DISPLAY_LIMIT or
                limit > self.MAX_RESULTS_DISPLAY_LIMIT):
            validation_result["valid"] = False
            validation_result["issues"].append(f"Invalid results display limit: {limit}")

        if not isinstance(self._data_directory, str) or not self._data_directory.strip():
            validation_result["valid"] = False
            validation_result["issues"].append(f"Invalid data directory: {self._data_directory}")

        return validation_result

    def get_settings_summary(self) -> str:
        """
        Get a formatted summary of current settings.

        Returns:
            Human-readable string describing current settings
        """
        return (
            f"Admin Settings:\n"
            f"• Image size: {self._settings.max_image_dimension}px max\n"
            f"• JPEG quality: {self._settings.jpeg_quality}\n"
            f"• Language: {self._settings.default_locale}\n"
            f"• Results shown: {self._settings.results_display_limit}\n"
            f"• Data Directory: {self._data_directory}"
        )

    def get_configuration_health_check(self) -> Dict[str, Any]:
        """
        Perform a health check of the configuration.

        Returns:
            Dictionary with health status and recommendations
        """
        health_check = {
            'healthy': True,
            'warnings': [],
            'errors': [],
            'recommendations': []
        }

        validation_result = self.validate_settings()
        if not validation_result['valid']:
            health_check['healthy'] = False
            health_check['errors'].extend(f"❌ {issue}" for issue in validation_result['issues'])

        data_dir = Path(self._data_directory)
        if not data_dir.exists():
            health_check['warnings'].append(
                f"⚠️ Data directory does not exist: {self._data_directory}"
            )
            health_check['recommendations'].append(
                "The data directory will be created automatically when the store loads."
            )
        elif not os.access(data_dir, os.R_OK | os.W_OK):
            health_check['healthy'] = False
            health_check['errors'].append(
                f"❌ Cannot read/write data directory: {self._data_directory}"
            )

        if self._settings.max_image_dimension > 1024:
            health_check['warnings'].append(
                f"⚠️ Large image dimension ({self._settings.max_image_dimension}px) inflates the store document"
            )
            health_check['recommendations'].append(
                "Images are embedded inline; keep them small."
            )

        return health_check
