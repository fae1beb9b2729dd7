"""Display labels and lateral position buckets."""

from __future__ import annotations

from vision.detections import DetectionType, Position


_CLASS_LABELS = {
    "person": "Persona",
    "car": "Auto",
    "truck": "Camión",
    "bus": "Autobús",
    "motorcycle": "Motocicleta",
    "bicycle": "Bicicleta",
    "chair": "Silla",
    "bench": "Banca",
    "potted plant": "Planta",
    "stop sign": "Señal de alto",
    "traffic light": "Semáforo",
    "fire hydrant": "Hidrante",
    "parking meter": "Parquímetro",
    "dog": "Perro",
    "cat": "Gato",
    "bird": "Pájaro",
    "horse": "Caballo",
    "sheep": "Oveja",
    "cow": "Vaca",
    "backpack": "Mochila",
    "umbrella": "Paraguas",
    "handbag": "Bolso",
    "suitcase": "Maleta",
    "bottle": "Botella",
    "cup": "Taza",
    "couch": "Sofá",
    "bed": "Cama",
    "dining table": "Mesa",
    "tv": "Televisor",
    "laptop": "Laptop",
    "skateboard": "Patineta",
    "sports ball": "Pelota",
    "kite": "Cometa",
    "frisbee": "Frisbi",
}

LEVEL_CHANGE_LABELS = {
    DetectionType.STAIR_DOWN: "Escalera bajando",
    DetectionType.STAIR_UP: "Escalera subiendo",
    DetectionType.CURB: "Bordillo o andén",
    DetectionType.FENCE: "Reja o baranda",
}

POSITION_WORDS = {
    Position.LEFT: "a tu izquierda",
    Position.CENTER: "adelante",
    Position.RIGHT: "a tu derecha",
}

LEFT_THRESHOLD = 0.35
RIGHT_THRESHOLD = 0.65


def translate_class_name(class_name: str) -> str:
    """Return the display label for a detector class, or the class name itself."""

    return _CLASS_LABELS.get(class_name.lower(), class_name)


def position_from_x(position_x: float) -> Position:
    if position_x < LEFT_THRESHOLD:
        return Position.LEFT
    if position_x > RIGHT_THRESHOLD:
        return Position.RIGHT
    return Position.CENTER
