"""ホストとのメッセージ（camelCaseの辞書/JSON）とドメインオブジェクトの変換

不正なメッセージはValidationErrorとして送出します。
スコアの無限大（生成失敗）はJSONで表現できないためnullとして出力します。
"""
import json
import math
from typing import Any, Dict, List, Optional

from ...application.services.progress_reporter import SEVERITIES, LogEvent
from ...application.worker.messages import (
    MODE_MULTIPLE,
    MODE_SINGLE,
    MODES,
    MultiResultEvent,
    ResultEvent,
    ScheduleRequest,
    WorkerEvent,
)
from ...domain.entities.class_info import ClassInfo
from ...domain.entities.schedule_config import DailyScheduleConfig, ScheduleConfig
from ...domain.entities.schedule_result import MultipleScheduleResult, ScheduleResult
from ...domain.entities.subject import Subject
from ...domain.entities.teacher import Teacher
from ...domain.value_objects.assignment import ConstraintLevel, ConstraintViolation, TimetableEntry
from ...domain.value_objects.relaxation import RelaxationSuggestion
from ...domain.value_objects.time_slot import PreferredTime, TimeSlot
from ...shared.mixins.logging_mixin import LoggingMixin
from ...shared.mixins.validation_mixin import ValidationError, ValidationMixin


class ScheduleMessageCodec(LoggingMixin, ValidationMixin):
    """メッセージの変換器"""

    # ------------------------------------------------------------------
    # 入力（ホスト → エンジン）
    # ------------------------------------------------------------------
    def decode_request_json(self, text: str) -> ScheduleRequest:
        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            raise ValidationError(f"JSONとして読み込めません: {e}") from e
        return self.decode_request(data)

    def decode_request(self, data: Dict[str, Any]) -> ScheduleRequest:
        """入力メッセージを変換

        modeが省略された場合、minCountかmaxAttemptsがあれば複数候補の生成とみなします。
        """
        self.validate_type(data, dict, "入力メッセージ")
        self.validate_required_keys(data, ["config", "subjects", "teachers", "classes"], "入力メッセージ")

        mode = data.get("mode")
        if mode is None:
            has_multi_keys = "minCount" in data or "maxAttempts" in data
            mode = MODE_MULTIPLE if has_multi_keys else MODE_SINGLE
        self.validate_in_choices(mode, MODES, "mode")

        request = ScheduleRequest(
            config=self.decode_config(data["config"]),
            subjects=[self.decode_subject(s) for s in self._list(data, "subjects")],
            teachers=[self.decode_teacher(t) for t in self._list(data, "teachers")],
            classes=[self.decode_class(c) for c in self._list(data, "classes")],
            mode=mode,
            min_count=self._optional_int(data, "minCount", 1),
            max_attempts=self._optional_int(data, "maxAttempts", 1),
            max_retries=self._optional_int(data, "maxRetries", 1),
            seed=self._optional_int(data, "seed", None),
        )
        self.logger.debug(
            f"入力を読み込みました: 学級{len(request.classes)}, 教科{len(request.subjects)}, "
            f"教員{len(request.teachers)}"
        )
        return request

    def decode_config(self, data: Dict[str, Any]) -> ScheduleConfig:
        self.validate_type(data, dict, "config")
        self.validate_required_keys(data, ["days", "maxPeriodsPerDay"], "config")
        days = self._list(data, "days")
        max_periods = self.validate_range(data["maxPeriodsPerDay"], 1, None, "maxPeriodsPerDay")

        grade_configs = {}
        for grade, grade_data in (data.get("gradeConfigs") or {}).items():
            self.validate_type(grade_data, dict, f"gradeConfigs.{grade}")
            grade_configs[int(grade)] = DailyScheduleConfig(
                days=tuple(grade_data.get("days") or ()),
                daily_max_periods=dict(grade_data.get("dailyMaxPeriods") or {}),
            )

        daily_max = dict(data.get("dailyMaxPeriods") or {})
        for day in daily_max:
            self.validate_in_choices(day, days, "dailyMaxPeriodsの曜日")

        return ScheduleConfig(
            days=tuple(days),
            max_periods_per_day=max_periods,
            daily_max_periods=daily_max,
            lunch_period=data.get("lunchPeriod") or 4,
            grade_configs=grade_configs,
        )

    def decode_subject(self, data: Dict[str, Any]) -> Subject:
        self.validate_type(data, dict, "subject")
        self.validate_required_keys(data, ["id", "name", "weeklyHours"], "subject")
        self.validate_range(data["weeklyHours"], 0, None, f"{data['id']}.weeklyHours")
        return Subject(
            id=data["id"],
            name=data["name"],
            weekly_hours=data["weeklyHours"],
            requires_special_room=data.get("requiresSpecialRoom", False),
            special_room_type=data.get("specialRoomType"),
            target_grades=data.get("targetGrades") or (),
            is_block_class=data.get("isBlockClass", False),
            block_hours=data.get("blockHours"),
            is_co_teaching=data.get("isCoTeaching", False),
            co_teaching_teachers=data.get("coTeachingTeachers") or (),
            is_external_instructor=data.get("isExternalInstructor", False),
            prefer_concentrated=data.get("preferConcentrated", False),
            priority=data.get("priority", 0),
            fixed_times=[self.decode_time_slot(t) for t in data.get("fixedTimes") or ()],
            grade_suitability=data.get("gradeSuitability") or (),
        )

    def decode_teacher(self, data: Dict[str, Any]) -> Teacher:
        self.validate_type(data, dict, "teacher")
        self.validate_required_keys(data, ["id", "name"], "teacher")
        preferred = []
        for item in data.get("preferredTimes") or ():
            slot = self.decode_time_slot(item)
            pattern = item.get("preference", "morning")
            self.validate_in_choices(pattern, ("morning", "afternoon"), "preference")
            preferred.append(PreferredTime(slot.day, slot.period, pattern))

        return Teacher(
            id=data["id"],
            name=data["name"],
            subjects=data.get("subjects") or (),
            max_weekly_hours=data.get("maxWeeklyHours", 25),
            unavailable_times=[self.decode_time_slot(t) for t in data.get("unavailableTimes") or ()],
            is_priority=data.get("isPriority", False),
            is_external=data.get("isExternal", False),
            preferred_times=preferred,
            max_daily_hours=data.get("maxDailyHours") or 6,
            allow_consecutive=data.get("allowConsecutive", False),
        )

    def decode_class(self, data: Dict[str, Any]) -> ClassInfo:
        self.validate_type(data, dict, "class")
        self.validate_required_keys(data, ["id", "grade", "classNumber"], "class")
        return ClassInfo(
            id=data["id"],
            grade=int(data["grade"]),
            class_number=int(data["classNumber"]),
            name=data.get("name", ""),
            lunch_period=data.get("lunchPeriod"),
        )

    def decode_time_slot(self, data: Dict[str, Any]) -> TimeSlot:
        self.validate_type(data, dict, "time slot")
        self.validate_required_keys(data, ["day", "period"], "time slot")
        return TimeSlot(data["day"], int(data["period"]))

    def decode_entry(self, data: Dict[str, Any]) -> TimetableEntry:
        self.validate_required_keys(data, ["id", "classId", "subjectId", "teacherId", "day", "period"], "entry")
        teacher_ids = data.get("teacherIds")
        return TimetableEntry(
            id=data["id"],
            class_id=data["classId"],
            subject_id=data["subjectId"],
            teacher_id=data["teacherId"],
            day=data["day"],
            period=int(data["period"]),
            teacher_ids=tuple(teacher_ids) if teacher_ids else None,
            room_id=data.get("roomId"),
            is_block_class=data.get("isBlockClass", False),
            block_start_period=data.get("blockStartPeriod"),
        )

    def decode_result(self, data: Dict[str, Any]) -> ScheduleResult:
        """ホストが保持していた結果を復元（手動編集用）"""
        self.validate_type(data, dict, "result")
        self.validate_required_keys(data, ["entries", "classes", "subjects", "teachers"], "result")
        score = data.get("score")
        return ScheduleResult(
            entries=[self.decode_entry(e) for e in data["entries"]],
            classes=[self.decode_class(c) for c in data["classes"]],
            subjects=[self.decode_subject(s) for s in data["subjects"]],
            teachers=[self.decode_teacher(t) for t in data["teachers"]],
            violations=[self.decode_violation(v) for v in data.get("violations") or ()],
            score=math.inf if score is None else float(score),
            days=list(data.get("days") or ()),
        )

    def decode_violation(self, data: Dict[str, Any]) -> ConstraintViolation:
        level = data.get("type") or data.get("level")
        self.validate_in_choices(level, [lv.value for lv in ConstraintLevel], "violation.type")
        return ConstraintViolation(
            level=ConstraintLevel(level),
            message=data.get("message", ""),
            constraint_name=data.get("constraintName", ""),
            entry_id=data.get("entryId"),
            details=dict(data.get("details") or {}),
        )

    # ------------------------------------------------------------------
    # 出力（エンジン → ホスト）
    # ------------------------------------------------------------------
    def encode_event(self, event: WorkerEvent) -> Dict[str, Any]:
        if isinstance(event, LogEvent):
            if event.severity not in SEVERITIES:
                raise ValidationError(f"不明なseverityです: {event.severity}")
            return event.to_dict()
        if isinstance(event, ResultEvent):
            return {"kind": event.kind, "value": self.encode_result(event.value)}
        if isinstance(event, MultiResultEvent):
            return {"kind": event.kind, "value": self.encode_multi_result(event.value)}
        raise ValidationError(f"不明なイベントです: {event!r}")

    def encode_event_json(self, event: WorkerEvent, indent: Optional[int] = None) -> str:
        return json.dumps(self.encode_event(event), ensure_ascii=False, indent=indent)

    def encode_result(self, result: ScheduleResult) -> Dict[str, Any]:
        return {
            "entries": [self.encode_entry(e) for e in result.entries],
            "classes": [self.encode_class(c) for c in result.classes],
            "subjects": [self.encode_subject(s) for s in result.subjects],
            "teachers": [self.encode_teacher(t) for t in result.teachers],
            "violations": [self.encode_violation(v) for v in result.violations],
            "score": None if math.isinf(result.score) else result.score,
            "days": list(result.days),
        }

    def encode_multi_result(self, multi: MultipleScheduleResult) -> Dict[str, Any]:
        return {
            "results": [self.encode_result(r) for r in multi.results],
            "selectedIndex": multi.selected_index,
            "generationAttempts": multi.generation_attempts,
            "relaxationAttempts": multi.relaxation_attempts,
            "canRelax": multi.can_relax,
            "relaxationSuggestions": [self.encode_suggestion(s) for s in multi.relaxation_suggestions],
            "relaxedConstraints": list(multi.relaxed_constraints),
        }

    def encode_entry(self, entry: TimetableEntry) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "id": entry.id,
            "classId": entry.class_id,
            "subjectId": entry.subject_id,
            "teacherId": entry.teacher_id,
            "day": entry.day,
            "period": entry.period,
            "isBlockClass": entry.is_block_class,
        }
        if entry.teacher_ids:
            data["teacherIds"] = list(entry.teacher_ids)
        if entry.room_id:
            data["roomId"] = entry.room_id
        if entry.block_start_period is not None:
            data["blockStartPeriod"] = entry.block_start_period
        return data

    def encode_violation(self, violation: ConstraintViolation) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "type": violation.level.value,
            "message": violation.message,
            "constraintName": violation.constraint_name,
            "details": self._camel_keys(violation.details),
        }
        if violation.entry_id:
            data["entryId"] = violation.entry_id
        return data

    def encode_suggestion(self, suggestion: RelaxationSuggestion) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "level": suggestion.level.value,
            "message": suggestion.message,
            "suggestion": suggestion.suggestion,
            "affectedConstraints": list(suggestion.affected_constraints),
        }
        if suggestion.action:
            data["action"] = {
                "type": suggestion.action.type,
                "target": suggestion.action.target,
                "details": self._camel_keys(suggestion.action.details),
            }
        return data

    def encode_subject(self, subject: Subject) -> Dict[str, Any]:
        return {
            "id": subject.id,
            "name": subject.name,
            "weeklyHours": subject.weekly_hours,
            "requiresSpecialRoom": subject.requires_special_room,
            "specialRoomType": subject.special_room_type,
            "targetGrades": list(subject.target_grades),
            "isBlockClass": subject.is_block_class,
            "blockHours": subject.block_hours,
            "isCoTeaching": subject.is_co_teaching,
            "coTeachingTeachers": list(subject.co_teaching_teachers),
            "isExternalInstructor": subject.is_external_instructor,
            "preferConcentrated": subject.prefer_concentrated,
            "priority": subject.priority,
            "fixedTimes": [self._slot(t) for t in subject.fixed_times],
            "gradeSuitability": list(subject.grade_suitability),
        }

    def encode_teacher(self, teacher: Teacher) -> Dict[str, Any]:
        return {
            "id": teacher.id,
            "name": teacher.name,
            "subjects": list(teacher.subjects),
            "maxWeeklyHours": teacher.max_weekly_hours,
            "unavailableTimes": [
                self._slot(t) for t in sorted(teacher.unavailable_times, key=lambda t: (t.day, t.period))
            ],
            "isPriority": teacher.is_priority,
            "isExternal": teacher.is_external,
            "preferredTimes": [
                {"day": p.day, "period": p.period, "preference": p.preference}
                for p in teacher.preferred_times
            ],
            "maxDailyHours": teacher.max_daily_hours,
            "allowConsecutive": teacher.allow_consecutive,
        }

    def encode_class(self, class_info: ClassInfo) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "id": class_info.id,
            "grade": class_info.grade,
            "classNumber": class_info.class_number,
            "name": class_info.display_name,
        }
        if class_info.lunch_period is not None:
            data["lunchPeriod"] = class_info.lunch_period
        return data

    # ------------------------------------------------------------------
    def _list(self, data: Dict[str, Any], key: str) -> List[Any]:
        return self.validate_type(data[key], list, key)

    def _optional_int(self, data: Dict[str, Any], key: str, minimum: Optional[int]) -> Optional[int]:
        value = data.get(key)
        if value is None:
            return None
        self.validate_type(value, (int, float), key)
        return int(self.validate_range(value, minimum, None, key))

    @staticmethod
    def _slot(slot: TimeSlot) -> Dict[str, Any]:
        return {"day": slot.day, "period": slot.period}

    @staticmethod
    def _camel_keys(details: Dict[str, Any]) -> Dict[str, Any]:
        def camel(key: str) -> str:
            head, *rest = key.split("_")
            return head + "".join(part.title() for part in rest)
        return {camel(k): v for k, v in details.items()}
