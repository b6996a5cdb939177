"""
The exercise catalog.

Built-in and supplemental entries are module constants and never change at
runtime. Custom entries belong to a single coach and are kept by the client
(see coachbuilder.client.storage), then merged in with all_exercises().
"""

from dataclasses import asdict, dataclass
from typing import Any, Iterable, Optional


IMAGE_BASE_URL = "https://raw.githubusercontent.com/yuhonas/free-exercise-db/main/exercises"
CUSTOM_IMAGE_URL = "https://placehold.co/600x400/png?text=Custom"

MUSCLE_GROUPS = [
    "All", "Chest", "Back", "Legs", "Shoulders", "Arms",
    "Core", "Glutes", "Cardio", "Forearms",
]

WORKOUT_DAYS = [
    "Chest Day", "Leg Day", "Push Day", "Pull Day",
    "Back Day", "Full Body", "Cardio Day", "Rest Day",
]


@dataclass(frozen=True)
class Exercise:
    """A catalog entry. Field names follow the stored JSON (camelCase)."""
    id: str
    name: str
    muscleGroup: str
    imageUrl: str = ""
    isCustom: bool = False
    isSupplemental: bool = False

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        # keep the stored records lean: flags only when set
        if not self.isCustom:
            data.pop("isCustom")
        if not self.isSupplemental:
            data.pop("isSupplemental")
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Exercise":
        return cls(
            id=str(data["id"]),
            name=str(data.get("name", "")),
            muscleGroup=str(data.get("muscleGroup", "")),
            imageUrl=str(data.get("imageUrl", "")),
            isCustom=bool(data.get("isCustom", False)),
            isSupplemental=bool(data.get("isSupplemental", False)),
        )


def _image(folder: str) -> str:
    return f"{IMAGE_BASE_URL}/{folder}/images/0.jpg"


BUILTIN_EXERCISES: tuple[Exercise, ...] = (
    # Chest
    Exercise("benchpress", "Barbell Bench Press", "Chest", _image("Barbell_Bench_Press_-_Medium_Grip")),
    Exercise("inclinepress", "Incline Dumbbell Press", "Chest", _image("Incline_Dumbbell_Press")),
    Exercise("dumbbellfly", "Dumbbell Flyes", "Chest", _image("Dumbbell_Flyes")),
    Exercise("pushup", "Push-Up", "Chest", _image("Pushups")),
    Exercise("cablecrossover", "Cable Crossover", "Chest", _image("Cable_Crossover")),
    # Back
    Exercise("pullup", "Pull-Up", "Back", _image("Pullups")),
    Exercise("latpulldown", "Lat Pulldown", "Back", _image("Wide-Grip_Lat_Pulldown")),
    Exercise("bentoverrow", "Bent Over Barbell Row", "Back", _image("Bent_Over_Barbell_Row")),
    Exercise("seatedcablerow", "Seated Cable Row", "Back", _image("Seated_Cable_Rows")),
    Exercise("onearmrow", "One-Arm Dumbbell Row", "Back", _image("One-Arm_Dumbbell_Row")),
    # Legs
    Exercise("squat", "Barbell Squat", "Legs", _image("Barbell_Full_Squat")),
    Exercise("deadlift", "Barbell Deadlift", "Legs", _image("Barbell_Deadlift")),
    Exercise("legpress", "Leg Press", "Legs", _image("Leg_Press")),
    Exercise("lunge", "Dumbbell Lunges", "Legs", _image("Dumbbell_Lunges")),
    Exercise("legextension", "Leg Extensions", "Legs", _image("Leg_Extensions")),
    Exercise("legcurl", "Lying Leg Curls", "Legs", _image("Lying_Leg_Curls")),
    Exercise("calfraise", "Standing Calf Raises", "Legs", _image("Standing_Calf_Raises")),
    # Shoulders
    Exercise("overheadpress", "Standing Military Press", "Shoulders", _image("Standing_Military_Press")),
    Exercise("dumbbellshoulderpress", "Dumbbell Shoulder Press", "Shoulders", _image("Dumbbell_Shoulder_Press")),
    Exercise("lateralraise", "Side Lateral Raise", "Shoulders", _image("Side_Lateral_Raise")),
    Exercise("facepull", "Face Pull", "Shoulders", _image("Face_Pull")),
    # Arms
    Exercise("bicepcurl", "Dumbbell Bicep Curl", "Arms", _image("Dumbbell_Bicep_Curl")),
    Exercise("hammercurl", "Hammer Curls", "Arms", _image("Hammer_Curls")),
    Exercise("tricepspushdown", "Triceps Pushdown", "Arms", _image("Triceps_Pushdown")),
    Exercise("skullcrusher", "EZ-Bar Skullcrusher", "Arms", _image("EZ-Bar_Skullcrusher")),
    Exercise("dips", "Dips - Triceps Version", "Arms", _image("Dips_-_Triceps_Version")),
    # Core
    Exercise("plank", "Plank", "Core", _image("Plank")),
    Exercise("crunch", "Crunches", "Core", _image("Crunches")),
    Exercise("hanginglegraise", "Hanging Leg Raise", "Core", _image("Hanging_Leg_Raise")),
    Exercise("russiantwist", "Russian Twist", "Core", _image("Russian_Twist")),
    # Glutes
    Exercise("hipthrust", "Barbell Hip Thrust", "Glutes", _image("Barbell_Hip_Thrust")),
    Exercise("glutebridge", "Barbell Glute Bridge", "Glutes", _image("Barbell_Glute_Bridge")),
    Exercise("cablekickback", "Glute Kickback", "Glutes", _image("Glute_Kickback")),
    # Cardio
    Exercise("treadmill", "Treadmill Running", "Cardio", _image("Running_Treadmill")),
    Exercise("bike", "Recumbent Bike", "Cardio", _image("Recumbent_Bike")),
    Exercise("rowingmachine", "Rowing, Stationary", "Cardio", _image("Rowing_Stationary")),
    Exercise("jumprope", "Rope Jumping", "Cardio", _image("Rope_Jumping")),
)


SUPPLEMENTAL_EXERCISES: tuple[Exercise, ...] = (
    # Forearms
    Exercise("wristcurl", "Dumbbell Wrist Curl", "Forearms", _image("Dumbbell_Wrist_Curl"), isSupplemental=True),
    Exercise("reversewristcurl", "Reverse Dumbbell Wrist Curl", "Forearms", _image("Dumbbell_Reverse_Wrist_Curl"), isSupplemental=True),
    Exercise("farmerswalk", "Farmer's Walk", "Forearms", _image("Dumbbell_Farmers_Walk"), isSupplemental=True),
    Exercise("hammercurl_forearms", "Hammer Curl (Forearms)", "Forearms", _image("Hammer_Curls"), isSupplemental=True),
    Exercise("platepinch", "Plate Pinch Hold", "Forearms", _image("Plate_Pinch"), isSupplemental=True),
    # Photo variants of the staples
    Exercise("benchpress_real", "Barbell Bench Press (Photo)", "Chest", _image("Barbell_Bench_Press"), isSupplemental=True),
    Exercise("squat_real", "Barbell Squat (Photo)", "Legs", _image("Barbell_Squat"), isSupplemental=True),
    Exercise("deadlift_real", "Barbell Deadlift (Photo)", "Legs", _image("Barbell_Deadlift"), isSupplemental=True),
    Exercise("pushup_real", "Push-Up (Photo)", "Chest", _image("Pushups"), isSupplemental=True),
    Exercise("pullup_real", "Pull-Up (Photo)", "Back", _image("Pullups"), isSupplemental=True),
    Exercise("bicepcurl_real", "Bicep Curl (Photo)", "Arms", _image("Dumbbell_Bicep_Curl"), isSupplemental=True),
    Exercise("shoulderpress_real", "Shoulder Press (Photo)", "Shoulders", _image("Dumbbell_Shoulder_Press"), isSupplemental=True),
    Exercise("lateralraise_real", "Lateral Raise (Photo)", "Shoulders", _image("Dumbbell_Lateral_Raise"), isSupplemental=True),
)


def all_exercises(custom: Iterable[Exercise] = ()) -> list[Exercise]:
    """Built-ins, then supplemental entries, then the coach's own."""
    return [*BUILTIN_EXERCISES, *SUPPLEMENTAL_EXERCISES, *custom]


def filter_by_group(exercises: Iterable[Exercise], group: str = "All") -> list[Exercise]:
    if group == "All":
        return list(exercises)
    return [exercise for exercise in exercises if exercise.muscleGroup == group]


def find_exercise(exercise_id: str, custom: Iterable[Exercise] = ()) -> Optional[Exercise]:
    for exercise in all_exercises(custom):
        if exercise.id == exercise_id:
            return exercise
    return None
