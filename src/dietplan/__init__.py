"""Diet planning: calorie and macro targets, meal selection and day plans."""

__version__ = "0.1.0"
