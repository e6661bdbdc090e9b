"""学校時間割スケジューリングエンジン

クラス・教科・教員の週間授業コマを、必須制約を守りつつ
ソフト制約をできるだけ満たすように割り当てます。
"""

__version__ = "1.0.0"
