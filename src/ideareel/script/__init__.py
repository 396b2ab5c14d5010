"""Script writing, segmentation and the generation pipeline."""
