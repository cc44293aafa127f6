# Perception Adapters - face presence and hand landmarks
from .face import MediaPipeFaceDetector
from .hands import MediaPipeHandDetector, landmarks_to_array

__all__ = ["MediaPipeFaceDetector", "MediaPipeHandDetector", "landmarks_to_array"]
