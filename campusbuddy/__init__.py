"""CampusBuddy student-services backend"""
