"""時間割の統計情報"""
from typing import Dict, List

import numpy as np
import pandas as pd

from ...domain.entities.schedule_config import ScheduleConfig
from ...domain.entities.schedule_result import ScheduleResult
from ...domain.value_objects.assignment import ConstraintLevel


class ScheduleStatistics:
    """生成結果の集計（教員の持ち時数・学級×教科の時数・充足率など）"""

    def __init__(self, result: ScheduleResult, config: ScheduleConfig):
        self.result = result
        self.config = config
        self.entries_df = pd.DataFrame(
            [
                {
                    'id': e.id,
                    'class_id': e.class_id,
                    'subject_id': e.subject_id,
                    'teacher_id': e.teacher_id,
                    'day': e.day,
                    'period': e.period,
                }
                for e in result.entries
            ],
            columns=['id', 'class_id', 'subject_id', 'teacher_id', 'day', 'period'],
        )

    def teacher_hours(self) -> pd.DataFrame:
        """教員ごとの持ち時数と上限に対する使用率（%）"""
        assigned: Dict[str, int] = {t.id: 0 for t in self.result.teachers}
        for entry in self.result.entries:
            for teacher_id in entry.all_teacher_ids:
                assigned[teacher_id] = assigned.get(teacher_id, 0) + 1

        df = pd.DataFrame(
            [
                {
                    'teacher_id': t.id,
                    'name': t.name,
                    'assigned': assigned.get(t.id, 0),
                    'max_weekly_hours': t.max_weekly_hours,
                }
                for t in self.result.teachers
            ],
            columns=['teacher_id', 'name', 'assigned', 'max_weekly_hours'],
        )
        capacity = df['max_weekly_hours'].replace(0, np.nan)
        df['utilization'] = (df['assigned'] / capacity * 100).astype(float).fillna(0.0).round(1)
        return df.set_index('teacher_id')

    def class_subject_hours(self) -> pd.DataFrame:
        """学級×教科の配置時数"""
        class_ids = [c.id for c in self.result.classes]
        subject_ids = [s.id for s in self.result.subjects]
        if self.entries_df.empty:
            return pd.DataFrame(0, index=class_ids, columns=subject_ids)

        pivot = (
            self.entries_df.groupby(['class_id', 'subject_id']).size()
            .unstack(fill_value=0)
        )
        return pivot.reindex(index=class_ids, columns=subject_ids, fill_value=0).astype(int)

    def fill_rate(self) -> float:
        """学級の授業コマのうち配置済みの割合（0〜1）"""
        total = sum(self.config.total_slots(c.grade) for c in self.result.classes)
        if total == 0:
            return 0.0
        filled = len({(e.class_id, e.day, e.period) for e in self.result.entries})
        return filled / total

    def teacher_load_variance(self) -> float:
        """教員の持ち時数の分散"""
        loads = self.teacher_hours()['assigned'].to_numpy(dtype=float)
        if loads.size == 0:
            return 0.0
        return float(np.var(loads))

    def violation_counts(self) -> Dict[str, int]:
        counts = {level.value: 0 for level in ConstraintLevel}
        for violation in self.result.violations:
            counts[violation.level.value] += 1
        return counts

    def summary(self) -> Dict[str, object]:
        return {
            'entries': len(self.result.entries),
            'score': self.result.score,
            'fill_rate': round(self.fill_rate(), 3),
            'teacher_load_variance': round(self.teacher_load_variance(), 3),
            'violations': self.violation_counts(),
        }

    def overloaded_teachers(self) -> List[str]:
        df = self.teacher_hours()
        return df.index[df['assigned'] > df['max_weekly_hours']].tolist()
