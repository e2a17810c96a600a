"""
Crop library Django application.

This app holds the crop taxonomy (crops, their scientific and alternate
names, parent/variety links), crop moderation, crop statistics derived
from plantings and harvests, and the bulk CSV importer.
"""
