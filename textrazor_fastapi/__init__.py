"""Line-by-line named entity annotation service backed by TextRazor."""
